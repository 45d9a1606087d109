"""Filtering, grouping and grid padding of the menu.

All functions are pure derivations of the catalog and the user's filters; the
view is recomputed whenever any of them changes.
"""

from collections.abc import Iterable

from walkin_pos.models.menu_models import (
    ALL_ITEMS,
    OTHERS_CATEGORY,
    CatalogState,
    MenuItem,
    MenuSection,
    MenuView,
)

NO_RESULTS_MESSAGE = "No items found"
EMPTY_MENU_MESSAGE = "Menu is empty"


def filter_items(
    items: Iterable[MenuItem],
    selected_category: str | None = ALL_ITEMS,
    search_text: str = "",
) -> list[MenuItem]:
    """Apply the category and search filters.

    Args:
        items: Catalog items in catalog order
        selected_category: Exact, case-sensitive category name, or ALL_ITEMS
        search_text: Case-insensitive substring of the item name

    Returns:
        Matching real items, order preserved
    """
    filtered = [item for item in items if not item.is_placeholder]

    if selected_category is not ALL_ITEMS:
        filtered = [item for item in filtered if item.category_name == selected_category]

    query = search_text.strip().lower()
    if query:
        filtered = [item for item in filtered if query in item.name.lower()]

    return filtered


def group_by_category(items: Iterable[MenuItem]) -> list[MenuSection]:
    """Group items into one section per category, sorted by category name."""
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(item.category_name or OTHERS_CATEGORY, []).append(item)

    return [MenuSection(title=title, items=grouped[title]) for title in sorted(grouped)]


def padded_length(length: int, columns: int) -> int:
    """Smallest multiple of ``columns`` that is at least ``length``."""
    if columns < 1:
        raise ValueError("columns must be at least 1")
    return -(-length // columns) * columns


def pad_sections(sections: list[MenuSection], columns: int) -> list[MenuSection]:
    """Append placeholders so every section fills whole grid rows.

    Placeholder ids count down from -1 across all sections, so they never
    collide with each other or with backend ids.

    Args:
        sections: Sections holding real items only
        columns: Grid column count

    Returns:
        New sections with placeholders appended
    """
    next_placeholder_id = -1
    padded: list[MenuSection] = []

    for section in sections:
        items = list(section.items)
        for _ in range(padded_length(len(items), columns) - len(items)):
            items.append(MenuItem.placeholder(next_placeholder_id))
            next_placeholder_id -= 1
        padded.append(MenuSection(title=section.title, items=items))

    return padded


def build_menu_view(state: CatalogState, columns: int) -> MenuView:
    """Derive the grouped, padded view the screen renders.

    Args:
        state: Current catalog and filter state
        columns: Grid column count chosen by the presentation layer

    Returns:
        MenuView with sections sorted by category

    Raises:
        ValueError: If columns is less than 1
    """
    if columns < 1:
        raise ValueError("columns must be at least 1")

    filtered = filter_items(state.items, state.selected_category, state.search_text)
    sections = pad_sections(group_by_category(filtered), columns)

    empty_message = None
    if not sections:
        filtering = bool(state.search_text.strip()) or state.selected_category is not ALL_ITEMS
        empty_message = NO_RESULTS_MESSAGE if filtering else EMPTY_MENU_MESSAGE

    return MenuView(sections=sections, columns=columns, empty_message=empty_message)
