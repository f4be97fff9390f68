"""Supply closet inventory package."""
from __future__ import annotations

from .exceptions import (
    AssistError,
    InventoryError,
    ItemNotFoundError,
    LocationInUseError,
    LocationNotFoundError,
    StorageError,
    StoreNotLoadedError,
    ValidationError,
)
from .models import InventoryItem, ItemCategory, ItemDraft, Location, UnitType
from .query import ALL_CATEGORIES, ALL_LOCATIONS, filter_items
from .stats import InventoryStats, compute_stats
from .status import Severity, StockLevel, StockStatus, classify, classify_item
from .storage import JsonFileStorage, RecordStorage, SqlRecordStorage, create_storage
from .store import InventoryStore, open_store

__all__ = [
    "ALL_CATEGORIES",
    "ALL_LOCATIONS",
    "AssistError",
    "InventoryError",
    "InventoryItem",
    "InventoryStats",
    "InventoryStore",
    "ItemCategory",
    "ItemDraft",
    "ItemNotFoundError",
    "JsonFileStorage",
    "Location",
    "LocationInUseError",
    "LocationNotFoundError",
    "RecordStorage",
    "Severity",
    "SqlRecordStorage",
    "StockLevel",
    "StockStatus",
    "StorageError",
    "StoreNotLoadedError",
    "UnitType",
    "ValidationError",
    "classify",
    "classify_item",
    "compute_stats",
    "create_storage",
    "filter_items",
    "open_store",
]
