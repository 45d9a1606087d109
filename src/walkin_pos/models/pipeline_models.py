"""Payment pipeline state models.

The pipeline state is an immutable record; every transition produces a new
instance, so observers can keep the previous state for comparison.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from walkin_pos.models.order_models import PaymentMode


class PipelineStage(str, Enum):
    """Stages of the payment and receipt pipeline."""

    IDLE = "idle"
    CART_REVIEW = "cart_review"
    PAYMENT_SELECT = "payment_select"
    PRINTING = "printing"
    SUBMITTING = "submitting"
    FAILED = "failed"


# Stages in which the pipeline owns the cart and refuses new intents.
BUSY_STAGES = frozenset({PipelineStage.PRINTING, PipelineStage.SUBMITTING})


class AdvisoryCode(str, Enum):
    """User-visible advisory kinds."""

    CONNECTIVITY_UNAVAILABLE = "connectivity_unavailable"
    CATALOG_FETCH_FAILED = "catalog_fetch_failed"
    EMPTY_CART = "empty_cart"
    PRINT_FAILED = "print_failed"
    PRINT_SUCCEEDED = "print_succeeded"


class Advisory(BaseModel):
    """A short message the screen shows as an alert."""

    model_config = ConfigDict(frozen=True)

    code: AdvisoryCode
    title: str
    message: str

    @classmethod
    def connectivity_unavailable(cls) -> "Advisory":
        return cls(
            code=AdvisoryCode.CONNECTIVITY_UNAVAILABLE,
            title="No Internet",
            message="Please connect to the internet.",
        )

    @classmethod
    def catalog_fetch_failed(cls) -> "Advisory":
        return cls(
            code=AdvisoryCode.CATALOG_FETCH_FAILED,
            title="Error",
            message="Failed to load menu.",
        )

    @classmethod
    def empty_cart(cls) -> "Advisory":
        return cls(
            code=AdvisoryCode.EMPTY_CART,
            title="Empty Cart",
            message="Please add items first.",
        )

    @classmethod
    def print_failed(cls) -> "Advisory":
        return cls(
            code=AdvisoryCode.PRINT_FAILED,
            title="Print Failed",
            message="Could not print the bill.",
        )

    @classmethod
    def print_succeeded(cls, payment_mode: PaymentMode) -> "Advisory":
        return cls(
            code=AdvisoryCode.PRINT_SUCCEEDED,
            title="Success",
            message=f"Bill printed! Paid via {payment_mode.value}",
        )


class PipelineState(BaseModel):
    """Snapshot of the payment pipeline.

    Attributes:
        stage: Current pipeline stage
        payment_mode: Mode chosen in PAYMENT_SELECT, kept while printing and on failure
        advisory: Most recent advisory raised by the pipeline
        return_stage: Stage a cancel or acknowledge returns to (IDLE or CART_REVIEW)
    """

    model_config = ConfigDict(frozen=True)

    stage: PipelineStage = Field(default=PipelineStage.IDLE)
    payment_mode: PaymentMode | None = Field(None)
    advisory: Advisory | None = Field(None)
    return_stage: PipelineStage = Field(default=PipelineStage.IDLE)

    @property
    def is_busy(self) -> bool:
        return self.stage in BUSY_STAGES
