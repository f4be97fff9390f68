"""Summary counts over an already filtered item list."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from .models import InventoryItem
from .status import StockLevel, classify_item


@dataclass(frozen=True)
class InventoryStats:
    total: int
    needs_refill: int
    by_level: Dict[StockLevel, int] = field(default_factory=dict)


def compute_stats(filtered_items: Iterable[InventoryItem]) -> InventoryStats:
    """Count the visible items and those holding less than their target.

    ``needs_refill`` uses a strict ``quantity < target_quantity`` comparison and
    is independent of the Low/Critical banding reported in ``by_level``.
    """

    total = 0
    needs_refill = 0
    by_level: Dict[StockLevel, int] = {level: 0 for level in StockLevel}
    for item in filtered_items:
        total += 1
        if item.quantity < item.target_quantity:
            needs_refill += 1
        by_level[classify_item(item).level] += 1
    return InventoryStats(total=total, needs_refill=needs_refill, by_level=by_level)


__all__ = ["InventoryStats", "compute_stats"]
