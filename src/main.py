"""Main application entry point for the walk-in POS engine.

This module provides the FastAPI application factory and configuration
for running the ordering engine on a counter kiosk.
"""

import logging
import os

from fastapi import FastAPI

from walkin_pos.adapters.base_printer import PrintAdapter
from walkin_pos.adapters.connectivity import ConnectivitySensor, ProbeConnectivitySensor
from walkin_pos.adapters.escpos_adapter import EscposPrintAdapter
from walkin_pos.adapters.http_print_adapter import HttpPrintAdapter
from walkin_pos.handlers.api_handler import create_app
from walkin_pos.handlers.event_handler import IntentDispatcher
from walkin_pos.handlers.pipeline import DEFAULT_MOBILE_NUMBER, PaymentPipeline
from walkin_pos.models.menu_models import CatalogState
from walkin_pos.observability import configure_logging, setup_observability
from walkin_pos.services.cart_service import CartService
from walkin_pos.services.menu_service_client import MenuServiceClient
from walkin_pos.services.order_service_client import OrderServiceClient
from walkin_pos.services.receipt_service import ReceiptService
from walkin_pos.services.sync_service import CatalogSyncService

logger = logging.getLogger(__name__)


def create_print_adapter() -> PrintAdapter:
    """Create the receipt printer adapter from environment variables.

    Returns:
        Configured print adapter

    Raises:
        ValueError: If the selected backend is unknown or misconfigured
    """
    backend = os.getenv("PRINTER_BACKEND", "http").lower()

    if backend == "http":
        print_service_url = os.getenv("PRINT_SERVICE_URL")
        if not print_service_url:
            raise ValueError("PRINT_SERVICE_URL must be set when PRINTER_BACKEND=http")
        logger.info(f"Using print server at {print_service_url}")
        return HttpPrintAdapter(print_service_url=print_service_url)

    if backend == "escpos":
        host = os.getenv("ESCPOS_HOST")
        if not host:
            raise ValueError("ESCPOS_HOST must be set when PRINTER_BACKEND=escpos")
        port = int(os.getenv("ESCPOS_PORT", "9100"))
        logger.info(f"Using ESC/POS printer at {host}:{port}")
        return EscposPrintAdapter(host=host, port=port)

    raise ValueError(f"Unknown PRINTER_BACKEND: {backend}")


def create_connectivity_sensor(catalog_base_url: str) -> ConnectivitySensor:
    """Create the connectivity sensor, probing the catalog service by default.

    Args:
        catalog_base_url: Fallback probe target

    Returns:
        Probe-based connectivity sensor
    """
    probe_url = os.getenv("CONNECTIVITY_PROBE_URL", catalog_base_url)
    interval = float(os.getenv("CONNECTIVITY_PROBE_INTERVAL_SECONDS", "15"))
    logger.info(f"Connectivity probe configured - URL: {probe_url}, every {interval}s")
    return ProbeConnectivitySensor(probe_url=probe_url, interval_seconds=interval)


def create_dispatcher() -> IntentDispatcher:
    """Wire the catalog, cart, pipeline and collaborators together.

    Returns:
        Dispatcher ready to be started

    Raises:
        ValueError: If required configuration is missing
    """
    catalog_base_url = os.getenv("CATALOG_SERVICE_BASE_URL")
    if not catalog_base_url:
        raise ValueError("CATALOG_SERVICE_BASE_URL must be set in environment")

    order_base_url = os.getenv("ORDER_SERVICE_BASE_URL", catalog_base_url)
    outlet_id = int(os.getenv("OUTLET_ID", "4"))

    catalog_state = CatalogState()
    cart_service = CartService(catalog_state=catalog_state)

    receipt_service = ReceiptService(
        outlet_name=os.getenv("OUTLET_NAME", "Pranavi's Samskriti (bakery)"),
        footer=os.getenv("RECEIPT_FOOTER", "Thank you for choosing us"),
        timezone=os.getenv("RECEIPT_TIMEZONE", "Asia/Kolkata"),
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "₹"),
    )

    pipeline = PaymentPipeline(
        cart_service=cart_service,
        receipt_service=receipt_service,
        print_adapter=create_print_adapter(),
        order_service_client=OrderServiceClient(base_url=order_base_url),
        outlet_id=outlet_id,
        mobile_number=os.getenv("WALKIN_MOBILE_NUMBER", DEFAULT_MOBILE_NUMBER),
    )

    sync_service = CatalogSyncService(
        menu_service_client=MenuServiceClient(base_url=catalog_base_url),
        catalog_state=catalog_state,
        outlet_id=outlet_id,
        on_advisory=pipeline.publish_advisory,
    )

    logger.info(f"Engine configured for outlet {outlet_id} - catalog: {catalog_base_url}")

    return IntentDispatcher(
        catalog_state=catalog_state,
        sync_service=sync_service,
        cart_service=cart_service,
        pipeline=pipeline,
        connectivity_sensor=create_connectivity_sensor(catalog_base_url),
    )


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing walk-in POS engine...")

    app = create_app(dispatcher=create_dispatcher())
    setup_observability(app)

    logger.info("Walk-in POS engine initialized successfully")
    return app


# Only build the real application outside of tests, so collection never needs
# a catalog URL or printer configuration
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "127.0.0.1")

    logger.info(f"Starting kiosk API on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
