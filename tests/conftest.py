"""Shared pytest fixtures and configuration for all tests."""

import os
from decimal import Decimal

import pytest

# Importing src.main must not build the real application
os.environ.setdefault("ENVIRONMENT", "test")

from walkin_pos.models.menu_models import CatalogState, FoodType, MenuItem  # noqa: E402


@pytest.fixture
def mock_outlet_id() -> int:
    """Fixture providing the standard test outlet ID."""
    return 4


@pytest.fixture
def mock_catalog_records() -> list[dict]:
    """Fixture providing raw item records as the catalog service returns them."""
    return [
        {
            "id": 1,
            "name": "Masala Dosa",
            "description": "Crisp dosa with potato filling",
            "price": "60",
            "foodType": "veg",
            "image": "https://example.com/dosa.jpg",
            "categoryName": "Breakfast",
        },
        {
            "id": 2,
            "name": "Chicken Puff",
            "description": None,
            "price": 35.5,
            "foodType": "non-veg",
            "image": None,
            "categoryName": "Snacks",
        },
        {
            "id": 3,
            "name": "Filter Coffee",
            "price": "20.00",
            "categoryName": None,
        },
    ]


@pytest.fixture
def mock_category_records() -> list[dict]:
    """Fixture providing raw category records."""
    return [{"id": 10, "name": "Breakfast"}, {"id": 11, "name": "Snacks"}]


@pytest.fixture
def sample_items() -> list[MenuItem]:
    """Fixture providing normalized items in three categories (A, B, C)."""
    return [
        MenuItem(id=1, name="Idli", price=Decimal("10"), category_name="A"),
        MenuItem(id=2, name="Vada", price=Decimal("20"), category_name="B"),
        MenuItem(id=3, name="Upma", price=Decimal("30"), category_name="A"),
        MenuItem(id=4, name="Pongal", price=Decimal("40"), category_name="C"),
        MenuItem(
            id=5,
            name="Egg Puff",
            price=Decimal("25"),
            category_name="C",
            food_type=FoodType.NON_VEG,
        ),
    ]


@pytest.fixture
def catalog_state(sample_items: list[MenuItem]) -> CatalogState:
    """Fixture providing a connected catalog holding ``sample_items``."""
    return CatalogState(items=sample_items, categories=["A", "B", "C"])
