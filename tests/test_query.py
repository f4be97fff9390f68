from __future__ import annotations

from itertools import permutations

import pytest

from supply_closet.exceptions import ValidationError
from supply_closet.models import ItemCategory
from supply_closet.query import ALL_CATEGORIES, ALL_LOCATIONS, filter_items

from conftest import make_item


@pytest.fixture()
def items():
    return [
        make_item("1", location_id="loc2", name="Rice", category="Food"),
        make_item("2", location_id="loc1", name="Blankets", category="Household"),
        make_item("3", location_id="loc2", name="Wool Socks", category="Clothing"),
        make_item("4", location_id="loc1", name="Brown Rice", category="Food"),
        make_item("5", location_id="loc2", name="Rice Milk", category="Food"),
    ]


def test_location_filter_keeps_insertion_order(items) -> None:
    result = filter_items(items, location="loc2", category=ALL_CATEGORIES, search="")
    assert [item.id for item in result] == ["1", "3", "5"]


def test_defaults_return_everything(items) -> None:
    assert filter_items(items) == items


def test_search_is_case_insensitive_on_name(items) -> None:
    result = filter_items(items, search="RICE")
    assert [item.id for item in result] == ["1", "4", "5"]


def test_search_does_not_match_notes() -> None:
    item = make_item("n", name="Soap")
    item.notes = "rice"
    assert filter_items([item], search="rice") == []


def test_category_accepts_enum_or_value(items) -> None:
    by_enum = filter_items(items, category=ItemCategory.FOOD)
    by_value = filter_items(items, category="Food")
    assert by_enum == by_value
    assert [item.id for item in by_enum] == ["1", "4", "5"]


def test_unknown_category_is_rejected(items) -> None:
    with pytest.raises(ValidationError):
        filter_items(items, category="Toys")


def test_filters_combine_in_any_order(items) -> None:
    steps = {
        "location": lambda seq: filter_items(seq, location="loc2"),
        "category": lambda seq: filter_items(seq, category=ItemCategory.FOOD),
        "search": lambda seq: filter_items(seq, search="rice"),
    }
    expected = filter_items(items, location="loc2", category="Food", search="rice")
    assert [item.id for item in expected] == ["1", "5"]
    for order in permutations(steps):
        result = items
        for name in order:
            result = steps[name](result)
        assert result == expected


def test_unknown_location_matches_nothing(items) -> None:
    assert filter_items(items, location="missing") == []
    assert len(filter_items(items, location=ALL_LOCATIONS)) == len(items)
