from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

from supply_closet.models import InventoryItem, _now
from supply_closet.storage import JsonFileStorage
from supply_closet.store import InventoryStore


def make_item(item_id: str, **overrides: Any) -> InventoryItem:
    values: Dict[str, Any] = {
        "location_id": "loc1",
        "name": f"Item {item_id}",
        "category": "Food",
        "quantity": 5,
        "target_quantity": 10,
        "unit": "items",
    }
    values.update(overrides)
    record = {
        "id": item_id,
        "locationId": values["location_id"],
        "name": values["name"],
        "category": values["category"],
        "quantity": values["quantity"],
        "targetQuantity": values["target_quantity"],
        "unit": values["unit"],
        "addedDate": _now().isoformat(),
    }
    if values.get("expiration_date"):
        record["expirationDate"] = values["expiration_date"]
    return InventoryItem.from_record(record)


def item_fields(**overrides: Any) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "location_id": "loc1",
        "name": "Canned Beans",
        "category": "Food",
        "quantity": 12,
        "target_quantity": 24,
        "unit": "cans",
    }
    fields.update(overrides)
    return fields


@pytest.fixture()
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "inventory.json"


@pytest.fixture()
def store(storage_path: Path) -> Iterator[InventoryStore]:
    inventory = InventoryStore(JsonFileStorage(storage_path)).load()
    yield inventory
    inventory.close()
