"""Order, payment and receipt models.

Orders are ephemeral: one is built after each successful print, posted to the
order backend, and discarded whatever the backend answers.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class PaymentMode(str, Enum):
    """Payment modes offered at the counter."""

    CASH = "Cash"
    UPI = "UPI"

    @property
    def caption(self) -> str:
        """Caption printed on the receipt."""
        return f"Paid by {self.value}"


class OrderItem(BaseModel):
    """One ordered item in the backend wire format."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: int = Field(..., alias="itemId", gt=0)
    quantity: int = Field(..., gt=0)


class PaymentRecord(BaseModel):
    """Payment details embedded in an order."""

    payment_status: str = Field(default="success")
    amount: Decimal = Field(..., ge=0)
    payment_method: str = Field(..., description="Lower-cased payment mode")

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)


class Order(BaseModel):
    """Order submission payload for ``POST /orders``."""

    model_config = ConfigDict(populate_by_name=True)

    mobile_number: str = Field(..., alias="mobileNumber")
    canteen_id: int = Field(..., alias="canteenId")
    items: list[OrderItem] = Field(..., min_length=1)
    total_amount: Decimal = Field(..., alias="totalAmount", ge=0)
    payment: PaymentRecord

    @field_serializer("total_amount")
    def serialize_total_amount(self, total_amount: Decimal) -> float:
        return float(total_amount)

    def to_request_body(self) -> dict[str, Any]:
        """Convert to the JSON body expected by the order backend.

        Returns:
            dict: camelCase payload with amounts as JSON numbers
        """
        return self.model_dump(mode="json", by_alias=True)


class ReceiptLine(BaseModel):
    """A single itemized line of a printed bill."""

    name: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    line_total: Decimal = Field(..., ge=0)


class ReceiptDocument(BaseModel):
    """Structured bill handed to the print service.

    Built purely from a cart snapshot, so it can be inspected in tests without
    a printer.
    """

    outlet_name: str
    printed_at: datetime
    timestamp_text: str
    lines: list[ReceiptLine] = Field(..., min_length=1)
    total: Decimal = Field(..., ge=0)
    payment_mode: PaymentMode
    payment_caption: str
    footer: str
    currency_symbol: str = Field(default="₹")
