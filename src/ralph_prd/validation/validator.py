"""Strict structural validation of a decoded PRD document.

Validation is document-wide and fail-closed: one bad entry invalidates the
whole document and no partially valid data is returned. Salvaging what can
be salvaged is the job of :mod:`ralph_prd.recovery`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from ralph_prd.domain.models import PrdEntry, ValidationResult, is_category
from ralph_prd.domain.values import ValueKind, as_mapping, as_sequence, kind_of

NOT_AN_ARRAY_ERROR: Final[str] = "PRD must be an array"


class _ErrorCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[str] = []

    def add(self, message: str) -> None:
        self._items.append(message)

    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)


def validate_prd(content: object) -> ValidationResult:
    """Validate a decoded document and return every problem found."""

    entries = as_sequence(content)
    if entries is None:
        return ValidationResult(valid=False, errors=(NOT_AN_ARRAY_ERROR,))

    errors = _ErrorCollector()
    data: list[PrdEntry] = []

    for index, item in enumerate(entries, start=1):
        prefix = f"Item {index}:"
        entry = as_mapping(item)
        if entry is None:
            errors.add(f"{prefix} must be an object")
            continue

        before = len(errors)
        _check_entry(entry, prefix, errors)
        if len(errors) == before:
            data.append(PrdEntry.from_dict(entry))  # type: ignore[arg-type]

    if len(errors):
        return ValidationResult(valid=False, errors=errors.items())
    return ValidationResult(valid=True, errors=(), data=data)


def _check_entry(entry: Mapping[object, object], prefix: str, errors: _ErrorCollector) -> None:
    category = entry.get("category")
    if kind_of(category) is not ValueKind.STRING:
        errors.add(f"{prefix} missing or invalid 'category' field")
    elif not is_category(category):
        errors.add(f"{prefix} invalid category '{category}'")

    description = entry.get("description")
    if kind_of(description) is not ValueKind.STRING or not description:
        errors.add(f"{prefix} missing or invalid 'description' field")

    steps = as_sequence(entry.get("steps"))
    if steps is None:
        errors.add(f"{prefix} missing or invalid 'steps' field (must be array)")
    else:
        for position, step in enumerate(steps, start=1):
            if kind_of(step) is not ValueKind.STRING:
                errors.add(f"{prefix} step {position} must be a string")

    if kind_of(entry.get("passes")) is not ValueKind.BOOLEAN:
        errors.add(f"{prefix} missing or invalid 'passes' field (must be boolean)")


__all__ = ["NOT_AN_ARRAY_ERROR", "validate_prd"]
