"""Entity store holding locations and items in memory over a storage gateway."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from threading import RLock
from typing import Any, Iterator, List, Mapping, Optional, Tuple
from uuid import uuid4
import logging

from .config import Settings, get_settings
from .exceptions import (
    ItemNotFoundError,
    LocationInUseError,
    LocationNotFoundError,
    StorageError,
    StoreNotLoadedError,
    ValidationError,
)
from .models import (
    InventoryItem,
    ItemDraft,
    Location,
    _coerce_name,
    _coerce_optional_text,
    _now,
    normalize_item_fields,
)
from .query import ALL_CATEGORIES, ALL_LOCATIONS, CategorySelector, filter_items
from .stats import InventoryStats, compute_stats
from .storage import (
    ITEMS_RECORD,
    LOCATIONS_RECORD,
    RecordStorage,
    create_storage,
    default_locations,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid4().hex


@dataclass
class InventoryStore:
    """Owns the location and item collections and saves them after each change.

    Call :meth:`load` (or enter the store as a context manager) before use.
    """

    storage: RecordStorage
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    _locations: List[Location] = field(default_factory=list, init=False, repr=False)
    _items: List[InventoryItem] = field(default_factory=list, init=False, repr=False)
    _loaded: bool = field(default=False, init=False)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> "InventoryStore":
        with self._lock:
            seeded = False
            location_records = self.storage.read(LOCATIONS_RECORD)
            if location_records is None:
                logger.info("No stored locations, seeding defaults")
                location_records = default_locations()
                seeded = True
            item_records = self.storage.read(ITEMS_RECORD)
            if item_records is None:
                item_records = []
                seeded = True
            try:
                locations = [Location.from_record(record) for record in location_records]
                items = [InventoryItem.from_record(record) for record in item_records]
            except ValidationError as exc:
                raise StorageError(f"Stored inventory is invalid: {exc}") from exc
            self._locations = locations
            self._items = items
            if seeded:
                self._save_locked()
            self._loaded = True
            logger.info("Loaded %d location(s) and %d item(s)", len(locations), len(items))
            return self

    def load_or_release(self) -> "InventoryStore":
        """Load, closing the storage gateway if loading fails."""

        try:
            return self.load()
        except Exception:
            self.storage.close()
            raise

    def close(self) -> None:
        with self._lock:
            if not self._loaded:
                return
            try:
                self._save_locked()
            finally:
                self._loaded = False
                self.storage.close()

    def __enter__(self) -> "InventoryStore":
        return self.load_or_release()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def items(self) -> Tuple[InventoryItem, ...]:
        with self._lock:
            self._require_loaded()
            return tuple(self._items)

    @property
    def locations(self) -> Tuple[Location, ...]:
        with self._lock:
            self._require_loaded()
            return tuple(self._locations)

    def get_item(self, item_id: str) -> InventoryItem:
        with self._lock:
            self._require_loaded()
            return self._items[self._item_index(item_id)]

    def find_location(self, location_id: str) -> Optional[Location]:
        with self._lock:
            self._require_loaded()
            for location in self._locations:
                if location.id == location_id:
                    return location
            return None

    def get_location(self, location_id: str) -> Location:
        location = self.find_location(location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        return location

    def items_at(self, location_id: str) -> List[InventoryItem]:
        with self._lock:
            self._require_loaded()
            return [item for item in self._items if item.location_id == location_id]

    def filtered(
        self,
        location: str = ALL_LOCATIONS,
        category: CategorySelector = ALL_CATEGORIES,
        search: str = "",
    ) -> List[InventoryItem]:
        return filter_items(self.items, location=location, category=category, search=search)

    def stats(
        self,
        location: str = ALL_LOCATIONS,
        category: CategorySelector = ALL_CATEGORIES,
        search: str = "",
    ) -> InventoryStats:
        return compute_stats(self.filtered(location=location, category=category, search=search))

    def new_item_draft(self, selector: str = ALL_LOCATIONS) -> ItemDraft:
        """Return add-form defaults for the given location selector."""

        if selector != ALL_LOCATIONS:
            return ItemDraft(location_id=selector)
        locations = self.locations
        return ItemDraft(location_id=locations[0].id if locations else None)

    # ------------------------------------------------------------------
    # Item mutations
    # ------------------------------------------------------------------
    def add_item(self, fields: Mapping[str, Any]) -> InventoryItem:
        values = normalize_item_fields(fields)
        with self._mutation():
            item = InventoryItem(id=_new_id(), added_date=_now(), **values)
            self._items.insert(0, item)
        logger.debug("Added item %s (%s)", item.id, item.name)
        return item

    def update_item(self, item_id: str, fields: Mapping[str, Any]) -> InventoryItem:
        values = normalize_item_fields(fields, partial=True)
        with self._mutation():
            index = self._item_index(item_id)
            updated = replace(self._items[index], **values)
            self._items[index] = updated
        logger.debug("Updated item %s fields=%s", item_id, sorted(values))
        return updated

    def remove_item(self, item_id: str) -> InventoryItem:
        with self._mutation():
            removed = self._items.pop(self._item_index(item_id))
        logger.debug("Removed item %s", item_id)
        return removed

    # ------------------------------------------------------------------
    # Location mutations
    # ------------------------------------------------------------------
    def add_location(
        self,
        name: str,
        address: Optional[str] = None,
        type: Optional[str] = None,
    ) -> Location:
        location = Location(
            id=_new_id(),
            name=_coerce_name(name, "name"),
            address=_coerce_optional_text(address, "address"),
            type=_coerce_optional_text(type, "type"),
        )
        with self._mutation():
            self._locations.append(location)
        logger.debug("Added location %s (%s)", location.id, location.name)
        return location

    def remove_location(self, location_id: str, *, cascade: bool = False) -> Location:
        """Delete a location.

        Items still stored at the location block the delete with
        :class:`LocationInUseError`; ``cascade=True`` removes them in the same
        save instead.
        """

        with self._mutation():
            index = self._location_index(location_id)
            held = [item for item in self._items if item.location_id == location_id]
            if held and not cascade:
                raise LocationInUseError(location_id, len(held))
            removed = self._locations.pop(index)
            if held:
                self._items = [item for item in self._items if item.location_id != location_id]
        logger.debug("Removed location %s with %d item(s)", location_id, len(held))
        return removed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_loaded(self) -> None:
        if not self._loaded:
            raise StoreNotLoadedError("Inventory store has not been loaded")

    def _item_index(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise ItemNotFoundError(item_id)

    def _location_index(self, location_id: str) -> int:
        for index, location in enumerate(self._locations):
            if location.id == location_id:
                return index
        raise LocationNotFoundError(location_id)

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock:
            self._require_loaded()
            snapshot = (list(self._locations), list(self._items))
            try:
                yield
                self._save_locked()
            except Exception:
                self._locations, self._items = snapshot
                raise

    def _save_locked(self) -> None:
        self.storage.write_all(
            {
                LOCATIONS_RECORD: [location.to_record() for location in self._locations],
                ITEMS_RECORD: [item.to_record() for item in self._items],
            }
        )


def open_store(settings: Optional[Settings] = None) -> InventoryStore:
    """Build a loaded store over the configured storage backend."""

    settings = settings or get_settings()
    return InventoryStore(create_storage(settings)).load_or_release()


__all__ = ["InventoryStore", "open_store"]
