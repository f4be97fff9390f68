"""Stock status classification against the agreed target quantity."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import InventoryItem

LOW_RATIO = 0.5
FILLED_RATIO = 1.0


class StockLevel(str, Enum):
    NO_TARGET = "No Target"
    FILLED = "Filled"
    LOW = "Low"
    CRITICAL = "Critical"


class Severity(str, Enum):
    NONE = "none"
    WARNING = "warning"
    ALERT = "alert"


@dataclass(frozen=True)
class StockStatus:
    level: StockLevel
    severity: Severity

    @property
    def label(self) -> str:
        return self.level.value

    @property
    def needs_attention(self) -> bool:
        return self.severity is not Severity.NONE


_STATUSES = {
    StockLevel.NO_TARGET: StockStatus(StockLevel.NO_TARGET, Severity.NONE),
    StockLevel.FILLED: StockStatus(StockLevel.FILLED, Severity.NONE),
    StockLevel.LOW: StockStatus(StockLevel.LOW, Severity.WARNING),
    StockLevel.CRITICAL: StockStatus(StockLevel.CRITICAL, Severity.ALERT),
}


def classify(quantity: float, target_quantity: float) -> StockStatus:
    """Map an on-hand quantity and its target to a stock status.

    Each band includes its lower bound: a ratio of exactly 1.0 is Filled and
    exactly 0.5 is Low.
    """

    if target_quantity == 0:
        return _STATUSES[StockLevel.NO_TARGET]
    ratio = quantity / target_quantity
    if ratio >= FILLED_RATIO:
        return _STATUSES[StockLevel.FILLED]
    if ratio >= LOW_RATIO:
        return _STATUSES[StockLevel.LOW]
    return _STATUSES[StockLevel.CRITICAL]


def classify_item(item: InventoryItem) -> StockStatus:
    return classify(item.quantity, item.target_quantity)


__all__ = ["Severity", "StockLevel", "StockStatus", "classify", "classify_item"]
