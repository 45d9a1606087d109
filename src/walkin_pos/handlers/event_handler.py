"""Intent handling for the ordering screen.

Every user intent, connectivity change and sync request goes through one
asyncio queue consumed by a single worker, so catalog and cart are never
mutated by two operations at once. Intents that wait on the network run as
tasks, which keeps the queue moving while a print or a sync is in flight; their
state changes are applied in single steps once the network call returns.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from walkin_pos.adapters.connectivity import ConnectivitySensor
from walkin_pos.handlers.pipeline import PaymentPipeline, PaymentTicket
from walkin_pos.models.menu_models import CatalogState
from walkin_pos.models.order_models import PaymentMode
from walkin_pos.services.cart_service import CartService
from walkin_pos.services.sync_service import CatalogSyncService

logger = logging.getLogger(__name__)


class IncreaseIntent(BaseModel):
    type: Literal["increase"] = "increase"
    item_id: int


class DecreaseIntent(BaseModel):
    type: Literal["decrease"] = "decrease"
    item_id: int


class SearchIntent(BaseModel):
    type: Literal["search"] = "search"
    text: str = ""


class SelectCategoryIntent(BaseModel):
    """Select a category; ``None`` selects All Items."""

    type: Literal["select_category"] = "select_category"
    category: str | None = None


class OpenCartIntent(BaseModel):
    type: Literal["open_cart"] = "open_cart"


class DismissCartIntent(BaseModel):
    type: Literal["dismiss_cart"] = "dismiss_cart"


class RequestPrintIntent(BaseModel):
    type: Literal["request_print"] = "request_print"


class CancelPaymentIntent(BaseModel):
    type: Literal["cancel_payment"] = "cancel_payment"


class ConfirmPaymentIntent(BaseModel):
    type: Literal["confirm_payment"] = "confirm_payment"
    payment_mode: PaymentMode


class AcknowledgeFailureIntent(BaseModel):
    type: Literal["acknowledge_failure"] = "acknowledge_failure"
    retry: bool = False


class DismissAdvisoryIntent(BaseModel):
    type: Literal["dismiss_advisory"] = "dismiss_advisory"


class SyncIntent(BaseModel):
    """Manual or startup catalog sync."""

    type: Literal["sync"] = "sync"


class ConnectivityChangedIntent(BaseModel):
    type: Literal["connectivity_changed"] = "connectivity_changed"
    connected: bool


Intent = Annotated[
    Union[
        IncreaseIntent,
        DecreaseIntent,
        SearchIntent,
        SelectCategoryIntent,
        OpenCartIntent,
        DismissCartIntent,
        RequestPrintIntent,
        CancelPaymentIntent,
        ConfirmPaymentIntent,
        AcknowledgeFailureIntent,
        DismissAdvisoryIntent,
        SyncIntent,
        ConnectivityChangedIntent,
    ],
    Field(discriminator="type"),
]

intent_adapter: TypeAdapter[Intent] = TypeAdapter(Intent)

# Intents that wait on the network and therefore run off the queue worker
_NETWORK_INTENTS = (SyncIntent, ConnectivityChangedIntent, ConfirmPaymentIntent)

# Intents still applied while a bill is printing or being submitted
_ALLOWED_WHILE_BUSY = (ConnectivityChangedIntent, DismissAdvisoryIntent)


def parse_intent(data: dict[str, Any]) -> Intent | None:
    """Parse a raw intent payload from the presentation layer.

    Args:
        data: Intent dictionary with a ``type`` tag

    Returns:
        The typed intent, or None if the payload is invalid
    """
    try:
        return intent_adapter.validate_python(data)
    except ValidationError as e:
        logger.error(f"Failed to parse intent: {e}")
        return None


class IntentDispatcher:
    """Serializes intents onto the catalog, cart and payment pipeline.

    ``submit`` enqueues an intent and returns a future resolving to whether
    the intent was accepted; ``dispatch`` awaits that future.
    """

    def __init__(
        self,
        catalog_state: CatalogState,
        sync_service: CatalogSyncService,
        cart_service: CartService,
        pipeline: PaymentPipeline,
        connectivity_sensor: ConnectivitySensor | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            catalog_state: Shared catalog and filter state
            sync_service: Catalog sync collaborator
            cart_service: Cart quantity owner
            pipeline: Payment and receipt pipeline
            connectivity_sensor: Optional sensor whose changes trigger re-syncs
        """
        self.catalog_state = catalog_state
        self.sync_service = sync_service
        self.cart_service = cart_service
        self.pipeline = pipeline
        self.connectivity_sensor = connectivity_sensor
        self._queue: asyncio.Queue[tuple[Intent, asyncio.Future[bool]]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self, initial_sync: bool = True) -> None:
        """Start the worker, read connectivity eagerly, and queue the first sync.

        Args:
            initial_sync: Whether to queue a catalog sync right away
        """
        if self.running:
            return

        self._worker = asyncio.create_task(self._run(), name="intent-dispatcher")

        if self.connectivity_sensor is not None:
            self.catalog_state.connected = await self.connectivity_sensor.refresh()
            self._unsubscribe = self.connectivity_sensor.add_listener(self._on_connectivity)
            watcher = asyncio.create_task(self.connectivity_sensor.watch(), name="connectivity-watch")
            self._tasks.add(watcher)
            watcher.add_done_callback(self._on_watch_done)

        if initial_sync:
            self.submit(SyncIntent())

        logger.info(f"Intent dispatcher started, connected={self.catalog_state.connected}")

    async def stop(self) -> None:
        """Stop the worker and cancel in-flight network intents."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        pending = [t for t in (self._worker, *self._tasks) if t is not None]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        while not self._queue.empty():
            _intent, future = self._queue.get_nowait()
            future.cancel()
            self._queue.task_done()

        self._worker = None
        self._tasks.clear()
        logger.info("Intent dispatcher stopped")

    async def _on_connectivity(self, connected: bool) -> None:
        self.submit(ConnectivityChangedIntent(connected=connected))

    def submit(self, intent: Intent) -> "asyncio.Future[bool]":
        """Queue an intent.

        Args:
            intent: Typed intent

        Returns:
            Future resolving to True if the intent changed state
        """
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((intent, future))
        return future

    async def dispatch(self, intent: Intent) -> bool:
        """Queue an intent and wait for its outcome."""
        return await self.submit(intent)

    async def _run(self) -> None:
        while True:
            intent, future = await self._queue.get()
            try:
                if self._refused(intent):
                    self._resolve(future, False)
                elif isinstance(intent, ConfirmPaymentIntent):
                    # Stage change and cart snapshot happen here, before later intents run
                    ticket = self.pipeline.begin_payment(intent.payment_mode)
                    if ticket is None:
                        self._resolve(future, False)
                    else:
                        self._spawn(self._settle(intent, future, ticket), future)
                elif isinstance(intent, _NETWORK_INTENTS):
                    self._spawn(self._settle(intent, future), future)
                else:
                    await self._settle(intent, future)
            finally:
                self._queue.task_done()

    def _spawn(self, coro: Coroutine[Any, Any, None], future: "asyncio.Future[bool]") -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        # A task cancelled before its first step never reaches _settle
        task.add_done_callback(lambda t: future.cancel() if t.cancelled() else None)

    @staticmethod
    def _resolve(future: "asyncio.Future[bool]", result: bool) -> None:
        if not future.done():
            future.set_result(result)

    def _on_watch_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Connectivity watch stopped unexpectedly", exc_info=task.exception()
            )

    async def _settle(
        self,
        intent: Intent,
        future: "asyncio.Future[bool]",
        ticket: PaymentTicket | None = None,
    ) -> None:
        try:
            if ticket is not None:
                result = await self.pipeline.finish_payment(ticket)
            else:
                result = await self._apply(intent)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            logger.exception(f"Intent {intent.type} failed")
            if not future.done():
                future.set_exception(e)
            return

        self._resolve(future, result)

    def _refused(self, intent: Intent) -> bool:
        if self.pipeline.state.is_busy and not isinstance(intent, _ALLOWED_WHILE_BUSY):
            logger.info(f"Ignoring {intent.type} while the bill is being processed")
            return True
        return False

    async def handle(self, intent: Intent) -> bool:
        """Apply one intent directly, bypassing the queue.

        Args:
            intent: Typed intent

        Returns:
            True if the intent was accepted
        """
        if self._refused(intent):
            return False
        return await self._apply(intent)

    async def _apply(self, intent: Intent) -> bool:
        if isinstance(intent, IncreaseIntent):
            return self.cart_service.increase(intent.item_id)
        if isinstance(intent, DecreaseIntent):
            return self.cart_service.decrease(intent.item_id)
        if isinstance(intent, SearchIntent):
            self.catalog_state.search_text = intent.text
            return True
        if isinstance(intent, SelectCategoryIntent):
            self.catalog_state.selected_category = intent.category
            return True
        if isinstance(intent, OpenCartIntent):
            return self.pipeline.open_cart()
        if isinstance(intent, DismissCartIntent):
            return self.pipeline.dismiss_cart()
        if isinstance(intent, RequestPrintIntent):
            return self.pipeline.request_print()
        if isinstance(intent, CancelPaymentIntent):
            return self.pipeline.cancel_payment()
        if isinstance(intent, ConfirmPaymentIntent):
            return await self.pipeline.confirm_payment(intent.payment_mode)
        if isinstance(intent, AcknowledgeFailureIntent):
            return self.pipeline.acknowledge_failure(retry=intent.retry)
        if isinstance(intent, DismissAdvisoryIntent):
            return self.pipeline.clear_advisory()
        if isinstance(intent, SyncIntent):
            return await self.sync_service.sync_all()
        if isinstance(intent, ConnectivityChangedIntent):
            return await self.sync_service.handle_connectivity_changed(intent.connected)

        raise TypeError(f"Unsupported intent: {intent!r}")
