"""Cart aggregation over the catalog's quantity field."""

import logging
from decimal import Decimal

from walkin_pos.models.menu_models import CatalogState, MenuItem

logger = logging.getLogger(__name__)


class CartService:
    """Service owning per-item cart quantities.

    The cart is not stored separately: it is every catalog item whose quantity
    is positive. Only ``quantity`` is ever written. Unknown ids and grid
    placeholders are ignored rather than treated as errors.
    """

    def __init__(self, catalog_state: CatalogState) -> None:
        """Initialize the CartService.

        Args:
            catalog_state: Shared catalog state whose items carry the quantities
        """
        self.catalog_state = catalog_state

    def _find(self, item_id: int) -> MenuItem | None:
        if item_id < 0:
            return None
        for item in self.catalog_state.items:
            if item.id == item_id:
                return item
        return None

    def increase(self, item_id: int) -> bool:
        """Add one unit of an item.

        Args:
            item_id: Catalog id of the item

        Returns:
            True if the quantity changed, False for an unknown id
        """
        item = self._find(item_id)
        if item is None:
            logger.debug(f"Ignoring increase for unknown item {item_id}")
            return False

        item.quantity += 1
        return True

    def decrease(self, item_id: int) -> bool:
        """Remove one unit of an item, never going below zero.

        Args:
            item_id: Catalog id of the item

        Returns:
            True if the quantity changed, False if unknown or already zero
        """
        item = self._find(item_id)
        if item is None or item.quantity == 0:
            return False

        item.quantity -= 1
        return True

    def cart_items(self) -> list[MenuItem]:
        """Items currently in the cart, in catalog order."""
        return [
            item
            for item in self.catalog_state.items
            if not item.is_placeholder and item.quantity > 0
        ]

    @staticmethod
    def line_total(item: MenuItem) -> Decimal:
        return item.price * item.quantity

    def total_item_count(self) -> int:
        """Sum of quantities across all real items."""
        return sum(item.quantity for item in self.catalog_state.items if not item.is_placeholder)

    def total_amount(self) -> Decimal:
        """Sum of price times quantity across all real items."""
        return sum(
            (self.line_total(item) for item in self.catalog_state.items if not item.is_placeholder),
            Decimal("0"),
        )

    def reset(self) -> None:
        """Zero every quantity."""
        for item in self.catalog_state.items:
            item.quantity = 0
