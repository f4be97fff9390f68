"""Location, category and name filtering over inventory items."""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from .models import InventoryItem, ItemCategory, coerce_category

ALL_LOCATIONS = "all"
ALL_CATEGORIES = "ALL"

CategorySelector = Union[ItemCategory, str]


def _resolve_category(category: CategorySelector) -> Optional[ItemCategory]:
    if category == ALL_CATEGORIES and not isinstance(category, ItemCategory):
        return None
    return coerce_category(category)


def filter_items(
    items: Iterable[InventoryItem],
    location: str = ALL_LOCATIONS,
    category: CategorySelector = ALL_CATEGORIES,
    search: str = "",
) -> List[InventoryItem]:
    """Return the items matching every selector, in their original order.

    ``location`` is either ``"all"`` or a location id, ``category`` is either
    ``"ALL"`` or one :class:`ItemCategory`, and ``search`` is matched
    case-insensitively against the item name only.
    """

    wanted_category = _resolve_category(category)
    needle = (search or "").lower()
    matches: List[InventoryItem] = []
    for item in items:
        if location != ALL_LOCATIONS and item.location_id != location:
            continue
        if wanted_category is not None and item.category is not wanted_category:
            continue
        if needle and needle not in item.name.lower():
            continue
        matches.append(item)
    return matches


__all__ = ["ALL_CATEGORIES", "ALL_LOCATIONS", "CategorySelector", "filter_items"]
