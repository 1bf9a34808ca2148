"""Unit tests for best-effort ``{description, passes}`` extraction."""

from __future__ import annotations

import pytest

from ralph_prd.domain.models import ExtractedItem
from ralph_prd.recovery import extract_item, extract_items

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("corrupted", [None, 5, "prd", True, 1.5])
def test_scalars_yield_nothing(corrupted: object) -> None:
    assert extract_items(corrupted) == []


def test_sequence_keeps_order_and_drops_items_without_description() -> None:
    corrupted = [
        {"description": "A", "passes": True},
        "junk",
        {"name": "B"},
        {"unrelated": 1},
        {"title": "C", "done": "yes"},
    ]

    assert extract_items(corrupted) == [
        ExtractedItem(description="A", passes=True),
        ExtractedItem(description="B", passes=False),
        ExtractedItem(description="C", passes=False),
    ]


def test_wrapped_features_with_status_token() -> None:
    corrupted = {"features": [{"name": "Add login", "status": "done"}]}

    assert extract_items(corrupted) == [ExtractedItem(description="Add login", passes=True)]


def test_only_first_wrapper_holding_a_sequence_is_used() -> None:
    corrupted = {"features": [], "items": [{"description": "X", "passes": True}]}

    assert extract_items(corrupted) == []


def test_wrapper_with_non_sequence_value_is_skipped() -> None:
    corrupted = {"features": "see below", "items": [{"description": "X", "done": True}]}

    assert extract_items(corrupted) == [ExtractedItem(description="X", passes=True)]


def test_unwrapped_mapping_is_a_single_candidate() -> None:
    corrupted = {"title": "Solo task", "completed": "Completed"}

    assert extract_items(corrupted) == [ExtractedItem(description="Solo task", passes=True)]


def test_description_synonyms_follow_priority_and_skip_empty_strings() -> None:
    assert extract_item({"name": "N", "description": "D"}) == ExtractedItem("D", False)
    assert extract_item({"description": "", "name": "N"}) == ExtractedItem("N", False)
    assert extract_item({"description": 12, "feature": "F"}) == ExtractedItem("F", False)
    assert extract_item({"description": ""}) is None
    assert extract_item("D") is None


def test_boolean_anywhere_beats_earlier_string_token() -> None:
    assert extract_item({"description": "D", "status": "done", "passes": False}) == ExtractedItem(
        "D", False
    )
    assert extract_item({"description": "D", "passes": "nope", "done": True}) == ExtractedItem(
        "D", True
    )


@pytest.mark.parametrize("token", ["true", "PASS", "Passed", "done", "complete", "finished"])
def test_truthy_tokens_are_case_insensitive(token: str) -> None:
    assert extract_item({"description": "D", "status": token}) == ExtractedItem("D", True)


def test_unrecognized_and_falsy_tokens_default_to_false() -> None:
    assert extract_item({"description": "D", "status": "pending"}) == ExtractedItem("D", False)
    assert extract_item({"description": "D", "status": "in progress"}) == ExtractedItem("D", False)
