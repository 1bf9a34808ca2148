"""Domain value types for PRD documents and untyped decoded input."""

from ralph_prd.domain.models import (
    Category,
    ExtractedItem,
    MergeResult,
    PrdEntry,
    ValidationResult,
    entries_to_payload,
    is_category,
)
from ralph_prd.domain.values import JSONValue, ValueKind, as_mapping, as_sequence, kind_of

__all__ = [
    "Category",
    "ExtractedItem",
    "JSONValue",
    "MergeResult",
    "PrdEntry",
    "ValidationResult",
    "ValueKind",
    "as_mapping",
    "as_sequence",
    "entries_to_payload",
    "is_category",
    "kind_of",
]
