"""Payment and receipt pipeline.

Stage changes are computed by the pure ``reduce`` function; ``PaymentPipeline``
holds the current state, drives the print and submit steps, and notifies
subscribers after every transition.
"""

import logging
from collections.abc import Callable
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from walkin_pos.adapters.base_printer import PrintAdapter
from walkin_pos.models.menu_models import MenuItem
from walkin_pos.models.order_models import (
    Order,
    OrderItem,
    PaymentMode,
    PaymentRecord,
    ReceiptDocument,
)
from walkin_pos.models.pipeline_models import Advisory, PipelineStage, PipelineState
from walkin_pos.observability.decorators import traced
from walkin_pos.observability.metrics import (
    record_order_submission,
    record_print_failure,
    record_receipt_printed,
)
from walkin_pos.services.cart_service import CartService
from walkin_pos.services.order_service_client import OrderServiceClient
from walkin_pos.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

StateListener = Callable[[PipelineState], None]

DEFAULT_MOBILE_NUMBER = "0000000000"


class PipelineEventType(str, Enum):
    """Events fed to the pipeline reducer."""

    OPEN_CART = "open_cart"
    DISMISS_CART = "dismiss_cart"
    PRINT_REQUESTED = "print_requested"
    PRINT_REJECTED_EMPTY = "print_rejected_empty"
    PAYMENT_CANCELLED = "payment_cancelled"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PRINT_SUCCEEDED = "print_succeeded"
    PRINT_FAILED = "print_failed"
    SUBMISSION_FINISHED = "submission_finished"
    FAILURE_ACKNOWLEDGED = "failure_acknowledged"
    ADVISORY = "advisory"
    ADVISORY_CLEARED = "advisory_cleared"


class PipelineEvent(BaseModel):
    """A reducer input with its optional payload."""

    model_config = ConfigDict(frozen=True)

    type: PipelineEventType
    payment_mode: PaymentMode | None = None
    advisory: Advisory | None = None
    retry: bool = False


class PaymentTicket(BaseModel):
    """Cart snapshot billed by a confirmed payment."""

    model_config = ConfigDict(frozen=True)

    items: list[MenuItem]
    total: Decimal
    payment_mode: PaymentMode


_BROWSING = (PipelineStage.IDLE, PipelineStage.CART_REVIEW)


def reduce(state: PipelineState, event: PipelineEvent) -> PipelineState:
    """Compute the next pipeline state.

    Events that are not valid in the current stage return ``state`` itself, so
    callers can detect a rejected intent with an identity check.

    Args:
        state: Current state
        event: Event to apply

    Returns:
        The next state
    """
    stage = state.stage
    kind = event.type

    if kind is PipelineEventType.ADVISORY:
        return state.model_copy(update={"advisory": event.advisory})

    if kind is PipelineEventType.ADVISORY_CLEARED:
        return state.model_copy(update={"advisory": None})

    if kind is PipelineEventType.OPEN_CART and stage is PipelineStage.IDLE:
        return state.model_copy(update={"stage": PipelineStage.CART_REVIEW})

    if kind is PipelineEventType.DISMISS_CART and stage is PipelineStage.CART_REVIEW:
        return state.model_copy(update={"stage": PipelineStage.IDLE})

    if kind is PipelineEventType.PRINT_REQUESTED and stage in _BROWSING:
        return state.model_copy(
            update={"stage": PipelineStage.PAYMENT_SELECT, "return_stage": stage}
        )

    if kind is PipelineEventType.PRINT_REJECTED_EMPTY and stage in _BROWSING:
        return state.model_copy(update={"advisory": Advisory.empty_cart()})

    if kind is PipelineEventType.PAYMENT_CANCELLED and stage is PipelineStage.PAYMENT_SELECT:
        return state.model_copy(update={"stage": state.return_stage, "payment_mode": None})

    if (
        kind is PipelineEventType.PAYMENT_CONFIRMED
        and stage is PipelineStage.PAYMENT_SELECT
        and event.payment_mode is not None
    ):
        return state.model_copy(
            update={"stage": PipelineStage.PRINTING, "payment_mode": event.payment_mode}
        )

    if (
        kind is PipelineEventType.PRINT_SUCCEEDED
        and stage is PipelineStage.PRINTING
        and state.payment_mode is not None
    ):
        return state.model_copy(
            update={
                "stage": PipelineStage.SUBMITTING,
                "advisory": Advisory.print_succeeded(state.payment_mode),
            }
        )

    if kind is PipelineEventType.PRINT_FAILED and stage is PipelineStage.PRINTING:
        return state.model_copy(
            update={"stage": PipelineStage.FAILED, "advisory": Advisory.print_failed()}
        )

    if kind is PipelineEventType.SUBMISSION_FINISHED and stage is PipelineStage.SUBMITTING:
        return state.model_copy(
            update={
                "stage": PipelineStage.IDLE,
                "payment_mode": None,
                "return_stage": PipelineStage.IDLE,
            }
        )

    if kind is PipelineEventType.FAILURE_ACKNOWLEDGED and stage is PipelineStage.FAILED:
        next_stage = PipelineStage.PAYMENT_SELECT if event.retry else state.return_stage
        return state.model_copy(update={"stage": next_stage, "payment_mode": None})

    return state


class PaymentPipeline:
    """Single-instance state machine from a filled cart to a recorded order.

    Printing must succeed before anything is submitted. Once printed, the
    order is submitted and the cart reset whatever the backend answers, since
    the customer already holds the paper receipt.
    """

    def __init__(
        self,
        cart_service: CartService,
        receipt_service: ReceiptService,
        print_adapter: PrintAdapter,
        order_service_client: OrderServiceClient,
        outlet_id: int,
        mobile_number: str = DEFAULT_MOBILE_NUMBER,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cart_service: Cart whose items are billed and later reset
            receipt_service: Builds the bill document
            print_adapter: Print service collaborator
            order_service_client: Order backend collaborator
            outlet_id: Sent as ``canteenId`` on every order
            mobile_number: Placeholder customer number for walk-in orders
        """
        self.cart_service = cart_service
        self.receipt_service = receipt_service
        self.print_adapter = print_adapter
        self.order_service_client = order_service_client
        self.outlet_id = outlet_id
        self.mobile_number = mobile_number
        self._state = PipelineState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register an observer called with every new state.

        Args:
            listener: Callable receiving the new PipelineState

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, event: PipelineEvent) -> bool:
        next_state = reduce(self._state, event)
        if next_state is self._state:
            logger.debug(f"Ignoring {event.type.value} in stage {self._state.stage.value}")
            return False

        self._state = next_state
        for listener in list(self._listeners):
            listener(next_state)
        return True

    def publish_advisory(self, advisory: Advisory) -> None:
        """Show an advisory raised outside the pipeline (e.g. by catalog sync)."""
        self._apply(PipelineEvent(type=PipelineEventType.ADVISORY, advisory=advisory))

    def clear_advisory(self) -> bool:
        if self._state.advisory is None:
            return False
        return self._apply(PipelineEvent(type=PipelineEventType.ADVISORY_CLEARED))

    def open_cart(self) -> bool:
        return self._apply(PipelineEvent(type=PipelineEventType.OPEN_CART))

    def dismiss_cart(self) -> bool:
        return self._apply(PipelineEvent(type=PipelineEventType.DISMISS_CART))

    def request_print(self) -> bool:
        """Move to payment selection if the cart has items.

        Returns:
            True if payment selection opened; False for an empty cart or a busy pipeline
        """
        if self._state.stage not in _BROWSING:
            return False

        if self.cart_service.total_item_count() == 0:
            logger.info("Print requested with an empty cart")
            self._apply(PipelineEvent(type=PipelineEventType.PRINT_REJECTED_EMPTY))
            return False

        return self._apply(PipelineEvent(type=PipelineEventType.PRINT_REQUESTED))

    def cancel_payment(self) -> bool:
        return self._apply(PipelineEvent(type=PipelineEventType.PAYMENT_CANCELLED))

    def acknowledge_failure(self, retry: bool = False) -> bool:
        """Leave the FAILED stage. The cart is kept either way.

        Args:
            retry: Go back to payment selection instead of the screen print was requested from
        """
        return self._apply(
            PipelineEvent(type=PipelineEventType.FAILURE_ACKNOWLEDGED, retry=retry)
        )

    def build_order(
        self, items: list[MenuItem], total: Decimal, payment_mode: PaymentMode
    ) -> Order:
        """Build the backend payload for a printed cart.

        Args:
            items: Cart snapshot (quantity > 0)
            total: Billed total
            payment_mode: Mode printed on the receipt

        Returns:
            Order ready to submit
        """
        return Order(
            mobile_number=self.mobile_number,
            canteen_id=self.outlet_id,
            items=[OrderItem(item_id=item.id, quantity=item.quantity) for item in items],
            total_amount=total,
            payment=PaymentRecord(
                payment_status="success",
                amount=total,
                payment_method=payment_mode.value.lower(),
            ),
        )

    @traced("pipeline.print_receipt")
    async def _print(self, receipt: ReceiptDocument) -> None:
        await self.print_adapter.print_receipt(receipt)

    @traced("pipeline.submit_order")
    async def _submit(self, order: Order) -> bool:
        try:
            return await self.order_service_client.create_order(order)
        except Exception:
            logger.exception("Unexpected error submitting order")
            return False

    def begin_payment(self, payment_mode: PaymentMode) -> PaymentTicket | None:
        """Lock in the cart and move to PRINTING without awaiting anything.

        Once this returns a ticket the pipeline is busy, so intents applied
        afterwards cannot change what gets billed.

        Args:
            payment_mode: Cash or UPI

        Returns:
            Ticket for ``finish_payment``, or None if the intent was rejected
        """
        if self._state.stage is not PipelineStage.PAYMENT_SELECT:
            return None

        items = [item.model_copy() for item in self.cart_service.cart_items()]
        if not items:
            # The cart was emptied (e.g. by a catalog re-sync) after print was requested
            self._apply(PipelineEvent(type=PipelineEventType.PAYMENT_CANCELLED))
            self._apply(PipelineEvent(type=PipelineEventType.PRINT_REJECTED_EMPTY))
            return None

        total = sum((CartService.line_total(item) for item in items), Decimal("0"))
        self._apply(PipelineEvent(type=PipelineEventType.PAYMENT_CONFIRMED, payment_mode=payment_mode))
        return PaymentTicket(items=items, total=total, payment_mode=payment_mode)

    async def finish_payment(self, ticket: PaymentTicket) -> bool:
        """Print the bill for a begun payment, then record the order.

        Args:
            ticket: Snapshot returned by ``begin_payment``

        Returns:
            True if the receipt was printed (whatever the backend answered),
            False if printing failed
        """
        payment_mode = ticket.payment_mode
        try:
            receipt = self.receipt_service.build_receipt(ticket.items, payment_mode)
            await self._print(receipt)
        except Exception as e:
            logger.error(f"Printing failed via {self.print_adapter.printer_name}: {e}")
            record_print_failure(self.print_adapter.printer_name)
            self._apply(PipelineEvent(type=PipelineEventType.PRINT_FAILED))
            return False

        logger.info(f"Bill printed, paid via {payment_mode.value}, total {ticket.total}")
        record_receipt_printed(payment_mode.value, ticket.total)
        self._apply(PipelineEvent(type=PipelineEventType.PRINT_SUCCEEDED))

        try:
            submitted = await self._submit(self.build_order(ticket.items, ticket.total, payment_mode))
            record_order_submission(submitted)
            if not submitted:
                logger.warning("Order was printed but not recorded by the backend")
        finally:
            self.cart_service.reset()
            self._apply(PipelineEvent(type=PipelineEventType.SUBMISSION_FINISHED))

        return True

    async def confirm_payment(self, payment_mode: PaymentMode) -> bool:
        """Print the bill for the chosen payment mode, then record the order.

        Args:
            payment_mode: Cash or UPI

        Returns:
            True if the receipt was printed, False if rejected or printing failed
        """
        ticket = self.begin_payment(payment_mode)
        if ticket is None:
            return False
        return await self.finish_payment(ticket)
