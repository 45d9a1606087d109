"""FastAPI application exposing the ordering engine to the kiosk front end."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Union

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from walkin_pos.handlers.event_handler import IntentDispatcher, SyncIntent, parse_intent
from walkin_pos.models.menu_models import MenuView
from walkin_pos.models.pipeline_models import PipelineState
from walkin_pos.services.menu_view import build_menu_view

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    connected: bool


class MenuResponse(BaseModel):
    """Menu grid plus the filter state it was derived from."""

    view: MenuView
    categories: list[str]
    selected_category: str | None
    search_text: str
    loading: bool
    connected: bool


class CartLine(BaseModel):
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartResponse(BaseModel):
    """Current cart contents and totals."""

    items: list[CartLine]
    total_item_count: int
    total_amount: Decimal


class IntentResponse(BaseModel):
    """Outcome of a dispatched intent."""

    accepted: bool
    pipeline: PipelineState


def create_app(dispatcher: IntentDispatcher, manage_dispatcher: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        dispatcher: Intent dispatcher wired to the engine
        manage_dispatcher: Start and stop the dispatcher with the application

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if manage_dispatcher:
            await dispatcher.start()
        try:
            yield
        finally:
            if manage_dispatcher:
                await dispatcher.stop()

    app = FastAPI(
        title="Walk-in POS API",
        description="Menu, cart and billing intents for the walk-in ordering screen",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.dispatcher = dispatcher

    def intent_response(accepted: bool) -> Union[IntentResponse, JSONResponse]:
        response = IntentResponse(accepted=accepted, pipeline=app.state.dispatcher.pipeline.state)
        if not accepted:
            return JSONResponse(status_code=409, content=response.model_dump(mode="json"))
        return response

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status with the last known connectivity
        """
        return HealthResponse(
            status="healthy",
            connected=app.state.dispatcher.catalog_state.connected,
        )

    @app.get("/menu", response_model=MenuResponse, tags=["Menu"])
    async def get_menu(columns: int = Query(2, ge=1, le=12)) -> MenuResponse:
        """Get the grouped, padded menu for a grid of ``columns`` columns.

        Args:
            columns: Grid column count (2 on phones, 4 on tablets)

        Returns:
            Menu view and filter state
        """
        state = app.state.dispatcher.catalog_state
        return MenuResponse(
            view=build_menu_view(state, columns),
            categories=state.categories,
            selected_category=state.selected_category,
            search_text=state.search_text,
            loading=state.loading,
            connected=state.connected,
        )

    @app.get("/cart", response_model=CartResponse, tags=["Cart"])
    async def get_cart() -> CartResponse:
        """Get the items in the cart with their line totals."""
        cart = app.state.dispatcher.cart_service
        return CartResponse(
            items=[
                CartLine(
                    item_id=item.id,
                    name=item.name,
                    quantity=item.quantity,
                    unit_price=item.price,
                    line_total=cart.line_total(item),
                )
                for item in cart.cart_items()
            ],
            total_item_count=cart.total_item_count(),
            total_amount=cart.total_amount(),
        )

    @app.get("/pipeline", response_model=PipelineState, tags=["Billing"])
    async def get_pipeline() -> PipelineState:
        """Get the payment pipeline stage and the latest advisory."""
        state: PipelineState = app.state.dispatcher.pipeline.state
        return state

    @app.post("/intents", response_model=IntentResponse, tags=["Intents"])
    async def post_intent(
        payload: dict[str, Any] = Body(...),
    ) -> Union[IntentResponse, JSONResponse]:
        """Dispatch a user intent, e.g. ``{"type": "increase", "item_id": 3}``.

        Returns:
            Whether the intent was accepted, and the resulting pipeline state

        Raises:
            HTTPException: 422 if the payload is not a known intent
        """
        intent = parse_intent(payload)
        if intent is None:
            raise HTTPException(status_code=422, detail="Invalid intent payload")

        accepted = await app.state.dispatcher.dispatch(intent)
        return intent_response(accepted)

    @app.post("/sync", response_model=IntentResponse, tags=["Menu"])
    async def trigger_sync() -> Union[IntentResponse, JSONResponse]:
        """Re-sync categories and items. Clears the cart."""
        logger.info("Manual catalog sync triggered")
        accepted = await app.state.dispatcher.dispatch(SyncIntent())
        return intent_response(accepted)

    return app
