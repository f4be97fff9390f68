from __future__ import annotations

from datetime import date, datetime, timezone
import math

import pytest

from supply_closet.exceptions import ValidationError
from supply_closet.models import (
    InventoryItem,
    ItemCategory,
    ItemDraft,
    Location,
    UnitType,
    normalize_item_fields,
)

from conftest import item_fields


def test_normalize_converts_to_domain_types() -> None:
    fields = normalize_item_fields(
        item_fields(quantity="3.5", expiration_date="2025-01-31", notes="  ")
    )
    assert fields["category"] is ItemCategory.FOOD
    assert fields["unit"] is UnitType.CANS
    assert fields["quantity"] == 3.5
    assert fields["expiration_date"] == date(2025, 1, 31)
    assert fields["notes"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "   "},
        {"quantity": -1},
        {"quantity": "lots"},
        {"quantity": True},
        {"quantity": math.nan},
        {"target_quantity": -0.5},
        {"category": "Toys"},
        {"unit": "pallets"},
        {"expiration_date": "31/01/2025"},
        {"expiration_date": "2024-01-01garbage"},
    ],
)
def test_normalize_rejects_bad_values(overrides) -> None:
    with pytest.raises(ValidationError):
        normalize_item_fields(item_fields(**overrides))


def test_normalize_requires_fields_unless_partial() -> None:
    with pytest.raises(ValidationError):
        normalize_item_fields({"name": "Soap"})
    assert normalize_item_fields({"name": "Soap"}, partial=True) == {"name": "Soap"}


def test_normalize_rejects_unknown_fields_and_skips_immutable_ones() -> None:
    with pytest.raises(ValidationError):
        normalize_item_fields({"colour": "red"}, partial=True)
    assert normalize_item_fields({"id": "x", "added_date": "y"}, partial=True) == {}


def test_item_record_uses_camel_case_and_omits_unset_optionals() -> None:
    added = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    item = InventoryItem(
        id="abc",
        added_date=added,
        **normalize_item_fields(item_fields(last_delivery_date=date(2024, 4, 30))),
    )
    record = item.to_record()
    assert record == {
        "id": "abc",
        "locationId": "loc1",
        "name": "Canned Beans",
        "category": "Food",
        "quantity": 12.0,
        "targetQuantity": 24.0,
        "unit": "cans",
        "lastDeliveryDate": "2024-04-30",
        "addedDate": "2024-05-01T12:30:00+00:00",
    }
    assert InventoryItem.from_record(record) == item


def test_item_record_requires_valid_added_date() -> None:
    record = {
        "id": "abc",
        "locationId": "loc1",
        "name": "Soap",
        "category": "Hygiene",
        "quantity": 1,
        "targetQuantity": 1,
        "unit": "items",
        "addedDate": "yesterday",
    }
    with pytest.raises(ValidationError):
        InventoryItem.from_record(record)


def test_location_record_round_trip() -> None:
    location = Location(id="loc9", name="Church Basement", type="Pantry")
    assert location.to_record() == {"id": "loc9", "name": "Church Basement", "type": "Pantry"}
    assert Location.from_record(location.to_record()) == location
    with pytest.raises(ValidationError):
        Location.from_record({"id": "loc9", "name": ""})


def test_draft_defaults() -> None:
    draft = ItemDraft()
    assert draft.category is ItemCategory.FOOD
    assert draft.unit is UnitType.COUNT
    assert draft.quantity == 0
    assert draft.target_quantity == 10
    assert set(draft.to_fields()) >= {"location_id", "name", "notes"}


def test_item_record_accepts_utc_z_suffix() -> None:
    record = {
        "id": "abc",
        "locationId": "loc1",
        "name": "Soap",
        "category": "Hygiene",
        "quantity": 1,
        "targetQuantity": 1,
        "unit": "items",
        "addedDate": "2024-05-01T12:30:00.000Z",
    }
    item = InventoryItem.from_record(record)
    assert item.added_date == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
