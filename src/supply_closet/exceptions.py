"""Error types raised by the supply closet core."""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for all supply closet errors."""


class ValidationError(InventoryError, ValueError):
    """Raised when a record or field fails boundary validation."""


class ItemNotFoundError(InventoryError, KeyError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item '{item_id}' not found")
        self.item_id = item_id

    def __str__(self) -> str:
        return str(self.args[0])


class LocationNotFoundError(InventoryError, KeyError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Location '{location_id}' not found")
        self.location_id = location_id

    def __str__(self) -> str:
        return str(self.args[0])


class LocationInUseError(InventoryError, ValueError):
    """Raised when deleting a location that items still reference."""

    def __init__(self, location_id: str, item_count: int) -> None:
        super().__init__(
            f"Location '{location_id}' still holds {item_count} item(s); "
            "pass cascade=True to delete them as well"
        )
        self.location_id = location_id
        self.item_count = item_count


class StoreNotLoadedError(InventoryError, RuntimeError):
    """Raised when the store is used before :meth:`InventoryStore.load`."""


class StorageError(InventoryError):
    """Raised when the persistence backend cannot read or write records."""


class AssistError(InventoryError):
    """Raised when the external assist service fails or answers badly."""


__all__ = [
    "InventoryError",
    "ValidationError",
    "ItemNotFoundError",
    "LocationNotFoundError",
    "LocationInUseError",
    "StoreNotLoadedError",
    "StorageError",
    "AssistError",
]
