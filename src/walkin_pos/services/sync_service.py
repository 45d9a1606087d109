"""Catalog sync service with connectivity gating."""

import asyncio
import logging
from collections.abc import Callable

from walkin_pos.models.menu_models import CatalogState
from walkin_pos.models.pipeline_models import Advisory
from walkin_pos.observability.decorators import traced
from walkin_pos.observability.metrics import record_catalog_sync
from walkin_pos.services.menu_service_client import MenuServiceClient

logger = logging.getLogger(__name__)

AdvisorySink = Callable[[Advisory], None]


class CatalogSyncService:
    """Service that keeps the in-memory catalog in step with the catalog service.

    Each sync fully replaces its part of the catalog. Item sync always starts
    every quantity at zero, so a re-sync clears the cart. Failures leave the
    previous catalog untouched and surface as advisories.
    """

    def __init__(
        self,
        menu_service_client: MenuServiceClient,
        catalog_state: CatalogState,
        outlet_id: int,
        on_advisory: AdvisorySink | None = None,
    ) -> None:
        """Initialize the CatalogSyncService.

        Args:
            menu_service_client: Client for fetching catalog data
            catalog_state: Shared state the sync writes into
            outlet_id: Outlet whose catalog is served
            on_advisory: Receives user-visible advisories
        """
        self.menu_service_client = menu_service_client
        self.catalog_state = catalog_state
        self.outlet_id = outlet_id
        self.on_advisory = on_advisory
        self._in_flight = 0

    def _advise(self, advisory: Advisory) -> None:
        if self.on_advisory is not None:
            self.on_advisory(advisory)

    def _begin(self) -> None:
        self._in_flight += 1
        self.catalog_state.loading = True

    def _end(self) -> None:
        self._in_flight -= 1
        self.catalog_state.loading = self._in_flight > 0

    @traced("catalog.sync_categories", attributes={"catalog.kind": "categories"})
    async def sync_categories(self) -> bool:
        """Replace the category list from the catalog service.

        When nothing is selected yet, the first fetched category becomes the
        selection.

        Returns:
            True if categories were replaced, False if offline or the fetch failed
        """
        if not self.catalog_state.connected:
            logger.warning("Skipping category sync: no connectivity")
            self._advise(Advisory.connectivity_unavailable())
            return False

        self._begin()
        try:
            categories = await self.menu_service_client.get_categories(self.outlet_id)
        finally:
            self._end()

        if categories is None:
            logger.error(f"Failed to fetch categories for outlet {self.outlet_id}")
            record_catalog_sync("categories", success=False)
            self._advise(Advisory.catalog_fetch_failed())
            return False

        self.catalog_state.categories = categories
        if self.catalog_state.selected_category is None and categories:
            self.catalog_state.selected_category = categories[0]

        logger.info(f"Fetched {len(categories)} categories for outlet {self.outlet_id}")
        record_catalog_sync("categories", success=True)
        return True

    @traced("catalog.sync_items", attributes={"catalog.kind": "items"})
    async def sync_items(self) -> bool:
        """Replace the item list from the catalog service.

        Returns:
            True if items were replaced, False if offline or the fetch failed
        """
        if not self.catalog_state.connected:
            logger.warning("Skipping item sync: no connectivity")
            self._advise(Advisory.connectivity_unavailable())
            return False

        self._begin()
        try:
            items = await self.menu_service_client.get_menu_items(self.outlet_id)
        finally:
            self._end()

        if items is None:
            logger.error(f"Failed to fetch menu items for outlet {self.outlet_id}")
            record_catalog_sync("items", success=False)
            self._advise(Advisory.catalog_fetch_failed())
            return False

        if any(item.quantity for item in self.catalog_state.items):
            logger.info("Item sync is discarding the current cart")

        self.catalog_state.items = items

        logger.info(f"Fetched {len(items)} menu items for outlet {self.outlet_id}")
        record_catalog_sync("items", success=True)
        return True

    async def sync_all(self) -> bool:
        """Sync categories and items concurrently.

        Returns:
            True only if both syncs succeeded
        """
        if not self.catalog_state.connected:
            logger.warning("Skipping catalog sync: no connectivity")
            self._advise(Advisory.connectivity_unavailable())
            return False

        categories_ok, items_ok = await asyncio.gather(self.sync_categories(), self.sync_items())
        return categories_ok and items_ok

    async def handle_connectivity_changed(self, connected: bool) -> bool:
        """Apply a connectivity event, re-syncing when the network comes back.

        Args:
            connected: New connectivity state

        Returns:
            True if a re-sync ran and fully succeeded
        """
        was_connected = self.catalog_state.connected
        self.catalog_state.connected = connected

        if connected and not was_connected:
            logger.info("Connectivity restored, re-syncing catalog")
            return await self.sync_all()

        return False
