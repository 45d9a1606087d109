"""Receipt document construction and rendering.

Everything here is pure: a receipt is built from a cart snapshot and a clock
reading, and rendered to markup or fixed-width text. Printing happens elsewhere.
"""

import html
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

from walkin_pos.models.menu_models import MenuItem
from walkin_pos.models.order_models import PaymentMode, ReceiptDocument, ReceiptLine

CENTS = Decimal("0.01")
DEFAULT_TEXT_WIDTH = 32


def format_amount(amount: Decimal) -> str:
    """Format a monetary amount to two decimal places."""
    return str(amount.quantize(CENTS, rounding=ROUND_HALF_UP))


def format_receipt_timestamp(moment: datetime) -> str:
    """Format a timestamp the way the counter prints it, e.g. ``19 Oct 2026, 3:05 pm``.

    Args:
        moment: Timezone-aware datetime already converted to the outlet's zone

    Returns:
        Human-readable timestamp
    """
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{moment.day} {moment:%b %Y}, {hour}:{moment:%M} {meridiem}"


class ReceiptService:
    """Builds bill documents for the outlet."""

    def __init__(
        self,
        outlet_name: str,
        footer: str,
        timezone: str = "Asia/Kolkata",
        currency_symbol: str = "₹",
    ) -> None:
        """Initialize the receipt service.

        Args:
            outlet_name: Header printed at the top of every bill
            footer: Closing line printed at the bottom
            timezone: IANA zone of the outlet, used for the printed timestamp
            currency_symbol: Symbol placed before amounts
        """
        self.outlet_name = outlet_name
        self.footer = footer
        self.timezone = ZoneInfo(timezone)
        self.currency_symbol = currency_symbol

    def build_receipt(
        self,
        items: Iterable[MenuItem],
        payment_mode: PaymentMode,
        now: datetime | None = None,
    ) -> ReceiptDocument:
        """Build a receipt from the items currently in the cart.

        Args:
            items: Catalog items; only real items with a positive quantity are billed
            payment_mode: Mode the customer paid with
            now: Clock reading, defaults to the current time

        Returns:
            ReceiptDocument ready to render

        Raises:
            ValueError: If no item has a positive quantity
        """
        lines = [
            ReceiptLine(
                name=item.name,
                quantity=item.quantity,
                unit_price=item.price,
                line_total=item.price * item.quantity,
            )
            for item in items
            if not item.is_placeholder and item.quantity > 0
        ]
        if not lines:
            raise ValueError("Cannot build a receipt for an empty cart")

        printed_at = (now or datetime.now(UTC)).astimezone(self.timezone)

        return ReceiptDocument(
            outlet_name=self.outlet_name,
            printed_at=printed_at,
            timestamp_text=format_receipt_timestamp(printed_at),
            lines=lines,
            total=sum((line.line_total for line in lines), Decimal("0")),
            payment_mode=payment_mode,
            payment_caption=payment_mode.caption,
            footer=self.footer,
            currency_symbol=self.currency_symbol,
        )


_RECEIPT_STYLE = """
    body { font-family: Arial; margin: 15px; font-size: 42px; }
    .header { text-align: center; font-weight: bold; font-size: 46px; margin-bottom: 10px; }
    .datetime { text-align: center; font-size: 42px; margin-bottom: 20px; border-bottom: 2px dashed #000; padding-top: 15px; }
    .row { display: flex; justify-content: space-between; margin: 8px 0; font-size: 36px; }
    .total { border-top: 2px dashed #000; padding-top: 15px; margin-top: 20px; font-weight: bold; font-size: 42px; }
    .payment { text-align: center; font-size: 40px; margin-top: 20px; font-weight: bold; }
    .footer { text-align: center; margin-top: 40px; margin-bottom: 80px; font-size: 38px; border-top: 2px dashed #000; padding-top: 15px; }
"""


def render_receipt_html(document: ReceiptDocument) -> str:
    """Render a receipt as a self-contained HTML document for the print service."""
    symbol = html.escape(document.currency_symbol)
    rows = "".join(
        f'\n      <div class="row">'
        f"<span>{html.escape(line.name)} × {line.quantity}</span>"
        f"<span>{symbol}{format_amount(line.line_total)}</span>"
        f"</div>"
        for line in document.lines
    )

    return f"""<html>
<head>
  <meta charset="utf-8">
  <style>{_RECEIPT_STYLE}</style>
</head>
<body>
  <div class="header">{html.escape(document.outlet_name)}</div>
  <div class="datetime">{html.escape(document.timestamp_text)}</div>
  <div class="items">{rows}
  </div>
  <div class="total">
    <div class="row"><span>Total Amount</span><span>{symbol}{format_amount(document.total)}</span></div>
  </div>
  <div class="payment">{html.escape(document.payment_caption)}</div>
  <div class="footer">{html.escape(document.footer)}</div>
</body>
</html>"""


def _two_columns(left: str, right: str, width: int) -> str:
    room = width - len(right) - 1
    if len(left) > room:
        left = left[: max(room - 1, 0)] + "~"
    return f"{left:<{room}} {right}"


def render_receipt_text(document: ReceiptDocument, width: int = DEFAULT_TEXT_WIDTH) -> str:
    """Render a receipt as fixed-width text for thermal printers.

    Args:
        document: Receipt to render
        width: Characters per printed line

    Returns:
        Receipt text, newline-terminated
    """
    rule = "-" * width
    symbol = document.currency_symbol
    out = [
        document.outlet_name.center(width).rstrip(),
        document.timestamp_text.center(width).rstrip(),
        rule,
    ]
    for line in document.lines:
        out.append(
            _two_columns(
                f"{line.name} x {line.quantity}",
                f"{symbol}{format_amount(line.line_total)}",
                width,
            )
        )
    out.append(rule)
    out.append(_two_columns("Total Amount", f"{symbol}{format_amount(document.total)}", width))
    out.append("")
    out.append(document.payment_caption.center(width).rstrip())
    out.append(rule)
    out.append(document.footer.center(width).rstrip())
    return "\n".join(out) + "\n"
