"""Domain entities for the supply closet inventory."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional
import math

from .exceptions import ValidationError


class ItemCategory(str, Enum):
    FOOD = "Food"
    CLOTHING = "Clothing"
    HYGIENE = "Hygiene"
    HOUSEHOLD = "Household"
    MEDICAL = "Medical"
    OTHER = "Other"


class UnitType(str, Enum):
    COUNT = "items"
    LBS = "lbs"
    KG = "kg"
    BOXES = "boxes"
    CANS = "cans"
    LITERS = "liters"


DEFAULT_TARGET_QUANTITY = 10.0

ITEM_FIELDS = frozenset(
    {
        "location_id",
        "name",
        "category",
        "quantity",
        "target_quantity",
        "unit",
        "expiration_date",
        "last_delivery_date",
        "notes",
    }
)
REQUIRED_ITEM_FIELDS = frozenset(
    {"location_id", "name", "category", "quantity", "target_quantity", "unit"}
)
IMMUTABLE_ITEM_FIELDS = frozenset({"id", "added_date"})


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _serialize_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_date(value: Any, field_name: str) -> Optional[date]:
    """Accept ``date`` objects or ``YYYY-MM-DD`` strings; blanks mean unset."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return None
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"{field_name} must be an ISO date, got {value!r}") from exc
    raise ValidationError(f"{field_name} must be a date, got {type(value).__name__}")


def _coerce_amount(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number, got {value!r}") from exc
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"{field_name} must be finite")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def _coerce_name(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return value.strip()


def _coerce_optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    text = value.strip()
    return text or None


def coerce_category(value: Any) -> ItemCategory:
    if isinstance(value, ItemCategory):
        return value
    try:
        return ItemCategory(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown category {value!r}") from exc


def coerce_unit(value: Any) -> UnitType:
    if isinstance(value, UnitType):
        return value
    try:
        return UnitType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown unit {value!r}") from exc


_FIELD_COERCERS = {
    "location_id": lambda value: _coerce_name(value, "location_id"),
    "name": lambda value: _coerce_name(value, "name"),
    "category": coerce_category,
    "quantity": lambda value: _coerce_amount(value, "quantity"),
    "target_quantity": lambda value: _coerce_amount(value, "target_quantity"),
    "unit": coerce_unit,
    "expiration_date": lambda value: _parse_date(value, "expiration_date"),
    "last_delivery_date": lambda value: _parse_date(value, "last_delivery_date"),
    "notes": lambda value: _coerce_optional_text(value, "notes"),
}


def normalize_item_fields(fields: Mapping[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """Validate caller-supplied item fields and convert them to domain types.

    ``id`` and ``added_date`` are dropped because they are owned by the store.
    With ``partial`` set only the supplied keys are checked, which is what an
    edit needs; otherwise every required field must be present.
    """

    unknown = set(fields) - ITEM_FIELDS - IMMUTABLE_ITEM_FIELDS
    if unknown:
        raise ValidationError(f"Unknown item field(s): {', '.join(sorted(unknown))}")
    if not partial:
        missing = REQUIRED_ITEM_FIELDS - set(fields)
        if missing:
            raise ValidationError(f"Missing item field(s): {', '.join(sorted(missing))}")
    normalized: Dict[str, Any] = {}
    for key, value in fields.items():
        if key in IMMUTABLE_ITEM_FIELDS:
            continue
        normalized[key] = _FIELD_COERCERS[key](value)
    return normalized


@dataclass
class Location:
    """A storage or distribution site."""

    id: str
    name: str
    address: Optional[str] = None
    type: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.address is not None:
            record["address"] = self.address
        if self.type is not None:
            record["type"] = self.type
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Location":
        if not isinstance(record, Mapping):
            raise ValidationError("Location record must be an object")
        location_id = record.get("id")
        if not isinstance(location_id, str) or not location_id:
            raise ValidationError("Location record is missing an id")
        return cls(
            id=location_id,
            name=_coerce_name(record.get("name"), "name"),
            address=_coerce_optional_text(record.get("address"), "address"),
            type=_coerce_optional_text(record.get("type"), "type"),
        )


@dataclass
class InventoryItem:
    """A single stock line held at one location."""

    id: str
    location_id: str
    name: str
    category: ItemCategory
    quantity: float
    target_quantity: float
    unit: UnitType
    added_date: datetime
    expiration_date: Optional[date] = None
    last_delivery_date: Optional[date] = None
    notes: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "locationId": self.location_id,
            "name": self.name,
            "category": self.category.value,
            "quantity": self.quantity,
            "targetQuantity": self.target_quantity,
            "unit": self.unit.value,
        }
        if self.expiration_date is not None:
            record["expirationDate"] = self.expiration_date.isoformat()
        if self.last_delivery_date is not None:
            record["lastDeliveryDate"] = self.last_delivery_date.isoformat()
        record["addedDate"] = _serialize_timestamp(self.added_date)
        if self.notes is not None:
            record["notes"] = self.notes
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InventoryItem":
        if not isinstance(record, Mapping):
            raise ValidationError("Item record must be an object")
        item_id = record.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise ValidationError("Item record is missing an id")
        added_date = _parse_timestamp(record.get("addedDate"))
        if added_date is None:
            raise ValidationError(f"Item '{item_id}' has an invalid addedDate")
        fields = normalize_item_fields(
            {
                "location_id": record.get("locationId"),
                "name": record.get("name"),
                "category": record.get("category"),
                "quantity": record.get("quantity"),
                "target_quantity": record.get("targetQuantity"),
                "unit": record.get("unit"),
                "expiration_date": record.get("expirationDate"),
                "last_delivery_date": record.get("lastDeliveryDate"),
                "notes": record.get("notes"),
            }
        )
        return cls(id=item_id, added_date=added_date, **fields)


@dataclass
class ItemDraft:
    """Editable field set for an item that has not been stored yet."""

    location_id: Optional[str] = None
    name: str = ""
    category: ItemCategory = ItemCategory.FOOD
    quantity: float = 0.0
    target_quantity: float = DEFAULT_TARGET_QUANTITY
    unit: UnitType = UnitType.COUNT
    expiration_date: Optional[date] = None
    last_delivery_date: Optional[date] = None
    notes: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in ITEM_FIELDS}


__all__ = [
    "DEFAULT_TARGET_QUANTITY",
    "ITEM_FIELDS",
    "InventoryItem",
    "ItemCategory",
    "ItemDraft",
    "Location",
    "UnitType",
    "coerce_category",
    "coerce_unit",
    "normalize_item_fields",
]
