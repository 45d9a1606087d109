"""Client for recording walk-in orders with the order backend."""

import logging

import httpx

from walkin_pos.models.order_models import Order

logger = logging.getLogger(__name__)


class OrderServiceClient:
    """HTTP client for the order backend.

    The response body is not interpreted; only success or failure matters.
    """

    def __init__(self, base_url: str, timeout_seconds: float = 10.0) -> None:
        """Initialize the order client.

        Args:
            base_url: Base URL of the order API
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def create_order(self, order: Order) -> bool:
        """Submit an order.

        Args:
            order: The order payload built from the printed cart

        Returns:
            bool: True if the backend accepted the order, False otherwise
        """
        url = f"{self.base_url}/orders"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=order.to_request_body())
                response.raise_for_status()

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to submit order for canteen {order.canteen_id}: {e}")
            return False

        logger.info(
            f"Order submitted for canteen {order.canteen_id}: "
            f"{len(order.items)} items, total {order.total_amount}"
        )
        return True
