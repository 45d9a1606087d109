"""Menu data models.

These models represent menu items and the derived menu view served to the
ordering screen. Raw catalog records are loosely typed; they are validated and
normalized here into the strict MenuItem shape before reaching the engine.
"""

import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

OTHERS_CATEGORY = "Others"
DEFAULT_DESCRIPTION = "No description available"

def _optional_text(record: dict[str, Any], key: str, default: str, item_id: int) -> str:
    value = record.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        logger.warning(f"Catalog record {item_id} has a non-text {key}: {value!r}, using default")
        return default
    return value


# Selecting "All Items" is represented by no category at all.
ALL_ITEMS: str | None = None


class FoodType(str, Enum):
    """Food classification shown on each item card."""

    VEG = "veg"
    NON_VEG = "non-veg"

    @classmethod
    def normalize(cls, value: Any) -> "FoodType":
        """Map a raw catalog value onto a FoodType, defaulting to VEG."""
        if isinstance(value, str) and value.strip().lower() == cls.NON_VEG.value:
            return cls.NON_VEG
        return cls.VEG


class MenuItem(BaseModel):
    """Menu item model.

    ``quantity`` is the item's current cart count. It is the only field the
    cart ever mutates.
    """

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: int = Field(..., description="Backend-assigned identifier, negative for grid placeholders")
    name: str = Field(..., description="Item name")
    description: str = Field(default=DEFAULT_DESCRIPTION, description="Item description")
    price: Decimal = Field(default=Decimal("0"), description="Item price", ge=0)
    food_type: FoodType = Field(default=FoodType.VEG, description="Veg / non-veg classification")
    image: str = Field(default="", description="Image URI, empty when the item has none")
    category_name: str = Field(default=OTHERS_CATEGORY, description="Category this item belongs to")
    quantity: int = Field(default=0, description="Current cart count", ge=0)

    @property
    def is_placeholder(self) -> bool:
        """Whether this entry only pads a grid row."""
        return self.id < 0

    @classmethod
    def placeholder(cls, placeholder_id: int) -> "MenuItem":
        """Create a synthetic grid-padding entry.

        Args:
            placeholder_id: Negative identifier, unique within the view

        Returns:
            MenuItem that is never purchasable or searchable
        """
        if placeholder_id >= 0:
            raise ValueError("placeholder ids must be negative")
        return cls(
            id=placeholder_id,
            name="",
            description="",
            price=Decimal("0"),
            food_type=FoodType.VEG,
            image="",
            category_name="",
            quantity=0,
        )

    @classmethod
    def from_catalog_record(cls, record: dict[str, Any]) -> "MenuItem | None":
        """Normalize a raw item record from the catalog service.

        Args:
            record: One entry of the ``data`` array returned by the items endpoint

        Returns:
            MenuItem with quantity 0, or None if the record cannot be trusted
        """
        if not isinstance(record, dict):
            logger.warning(f"Skipping catalog record that is not an object: {record!r}")
            return None

        raw_id = record.get("id")
        name = record.get("name")
        try:
            item_id = int(raw_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning(f"Skipping catalog record with invalid id: {raw_id!r}")
            return None

        if isinstance(raw_id, bool) or item_id <= 0:
            logger.warning(f"Skipping catalog record with non-positive id: {raw_id!r}")
            return None

        if not isinstance(name, str) or not name:
            logger.warning(f"Skipping catalog record {item_id} without a name")
            return None

        raw_price = record.get("price") or "0"
        try:
            price = Decimal(str(raw_price))
        except InvalidOperation:
            logger.warning(f"Skipping catalog record {item_id} with invalid price: {raw_price!r}")
            return None

        if not price.is_finite() or price < 0:
            logger.warning(f"Skipping catalog record {item_id} with invalid price: {raw_price!r}")
            return None

        try:
            return cls(
                id=item_id,
                name=name,
                description=_optional_text(record, "description", DEFAULT_DESCRIPTION, item_id),
                price=price,
                food_type=FoodType.normalize(record.get("foodType")),
                image=_optional_text(record, "image", "", item_id),
                category_name=_optional_text(record, "categoryName", OTHERS_CATEGORY, item_id),
                quantity=0,
            )
        except ValidationError as e:
            logger.warning(f"Skipping catalog record {item_id}: {e}")
            return None


class MenuSection(BaseModel):
    """One category group of the rendered menu grid."""

    title: str = Field(..., description="Category name")
    items: list[MenuItem] = Field(default_factory=list, description="Real items, then placeholders")

    @property
    def real_items(self) -> list[MenuItem]:
        """Items of this section without grid padding."""
        return [item for item in self.items if not item.is_placeholder]


class MenuView(BaseModel):
    """Grouped, padded menu view derived from the catalog and the user's filters."""

    sections: list[MenuSection] = Field(default_factory=list)
    columns: int = Field(..., description="Grid column count the view was padded for", gt=0)
    empty_message: str | None = Field(None, description="Shown when no section is visible")


class CatalogState(BaseModel):
    """In-memory catalog and filter state for the current session.

    The cart lives in the ``quantity`` field of ``items``; there is no
    separate cart store.
    """

    items: list[MenuItem] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    selected_category: str | None = Field(ALL_ITEMS, description="None means All Items")
    search_text: str = Field(default="")
    loading: bool = Field(default=False)
    connected: bool = Field(default=True)
