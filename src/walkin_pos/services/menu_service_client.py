"""Client for fetching the outlet's menu catalog."""

import logging
from typing import Any

import httpx

from walkin_pos.models.menu_models import MenuItem

logger = logging.getLogger(__name__)


class MenuServiceClient:
    """HTTP client for fetching categories and items from the catalog service.

    Expected failures (network errors, error statuses, malformed bodies) are
    logged and reported as ``None`` so the caller can keep its previous catalog.
    """

    def __init__(self, base_url: str, timeout_seconds: float = 10.0) -> None:
        """Initialize the catalog client.

        Args:
            base_url: Base URL of the catalog API (e.g., "http://pos.example.com:3100/api")
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def _get_data(self, url: str) -> list[Any] | None:
        """GET a catalog endpoint and return its ``data`` array.

        Args:
            url: Absolute endpoint URL

        Returns:
            The ``data`` list, or None on any failure
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url)
                response.raise_for_status()
                body = response.json()

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Catalog request to {url} failed: {e}")
            return None
        except ValueError as e:
            logger.error(f"Catalog response from {url} is not valid JSON: {e}")
            return None

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            logger.error(f"Catalog response from {url} has no data list")
            return None

        return data

    async def get_categories(self, outlet_id: int) -> list[str] | None:
        """Fetch category names for an outlet.

        Args:
            outlet_id: The outlet to fetch categories for

        Returns:
            Category names in service order, empty list if none exist, or None on failure
        """
        data = await self._get_data(f"{self.base_url}/categories/{outlet_id}")
        if data is None:
            return None

        categories: list[str] = []
        for category_data in data:
            name = category_data.get("name") if isinstance(category_data, dict) else None
            if not isinstance(name, str) or not name:
                logger.warning(f"Skipping category without a name: {category_data!r}")
                continue
            categories.append(name)

        return categories

    async def get_menu_items(self, outlet_id: int) -> list[MenuItem] | None:
        """Fetch and normalize menu items for an outlet.

        Records that fail validation are skipped, as are repeated ids (the
        first occurrence wins).

        Args:
            outlet_id: The outlet to fetch items for

        Returns:
            List of MenuItem objects with zero quantity, or None on failure
        """
        data = await self._get_data(f"{self.base_url}/items/{outlet_id}")
        if data is None:
            return None

        items: list[MenuItem] = []
        seen_ids: set[int] = set()
        for item_data in data:
            item = MenuItem.from_catalog_record(item_data)
            if item is None:
                continue
            if item.id in seen_ids:
                logger.warning(f"Skipping duplicate catalog item id {item.id}")
                continue
            seen_ids.add(item.id)
            items.append(item)

        return items
