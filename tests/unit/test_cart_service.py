"""Unit tests for CartService."""

from decimal import Decimal

import pytest

from walkin_pos.models.menu_models import CatalogState, MenuItem
from walkin_pos.services.cart_service import CartService


@pytest.mark.unit
class TestCartService:
    """Test suite for CartService."""

    @pytest.fixture
    def cart(self, catalog_state: CatalogState) -> CartService:
        """Create a CartService over the sample catalog."""
        return CartService(catalog_state=catalog_state)

    def test_increase(self, cart: CartService, catalog_state: CatalogState) -> None:
        """Test adding units of an item."""
        assert cart.increase(1) is True
        assert cart.increase(1) is True

        assert catalog_state.items[0].quantity == 2

    def test_decrease(self, cart: CartService, catalog_state: CatalogState) -> None:
        """Test removing a unit of an item."""
        cart.increase(2)

        assert cart.decrease(2) is True
        assert catalog_state.items[1].quantity == 0

    def test_decrease_at_zero_is_noop(self, cart: CartService, catalog_state: CatalogState) -> None:
        """Test that quantities never go below zero."""
        assert cart.decrease(2) is False
        assert catalog_state.items[1].quantity == 0

    @pytest.mark.parametrize("item_id", [999, -1, 0])
    def test_unknown_ids_are_ignored(self, cart: CartService, item_id: int) -> None:
        """Test that unknown and placeholder ids change nothing."""
        assert cart.increase(item_id) is False
        assert cart.decrease(item_id) is False
        assert cart.total_item_count() == 0

    def test_totals(self, cart: CartService) -> None:
        """Test counts and amounts for A x2 at 10.00 and B x1 at 20.00."""
        cart.increase(1)
        cart.increase(1)
        cart.increase(2)

        assert cart.total_item_count() == 3
        assert cart.total_amount() == Decimal("40.00")
        assert [item.id for item in cart.cart_items()] == [1, 2]

    def test_line_total(self) -> None:
        """Test price times quantity for one item."""
        item = MenuItem(id=1, name="Idli", price=Decimal("12.50"), quantity=3)

        assert CartService.line_total(item) == Decimal("37.50")

    def test_empty_cart(self, cart: CartService) -> None:
        """Test totals of an empty cart."""
        assert cart.cart_items() == []
        assert cart.total_item_count() == 0
        assert cart.total_amount() == Decimal("0")

    def test_reset(self, cart: CartService, catalog_state: CatalogState) -> None:
        """Test that reset zeroes every quantity and keeps the catalog."""
        cart.increase(1)
        cart.increase(4)

        cart.reset()

        assert cart.total_item_count() == 0
        assert len(catalog_state.items) == 5

    def test_placeholders_excluded_from_totals(self) -> None:
        """Test that padding entries never count toward the cart."""
        state = CatalogState(
            items=[MenuItem(id=1, name="Idli", price=Decimal("10"), quantity=1), MenuItem.placeholder(-1)]
        )
        cart = CartService(state)

        assert cart.total_item_count() == 1
        assert cart.total_amount() == Decimal("10")
        assert len(cart.cart_items()) == 1
