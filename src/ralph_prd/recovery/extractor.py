"""Best-effort extraction of ``{description, passes}`` facts from any shape."""

from __future__ import annotations

from collections.abc import Iterable

from ralph_prd.domain.models import ExtractedItem
from ralph_prd.domain.values import ValueKind, as_mapping, as_sequence, kind_of
from ralph_prd.recovery.fields import find_wrapped_sequence, scan_description, scan_passes


def extract_items(corrupted: object) -> list[ExtractedItem]:
    """Pull every salvageable item out of an untrusted decoded value.

    Items without a recoverable description are dropped silently.
    """

    match kind_of(corrupted):
        case ValueKind.SEQUENCE:
            return _extract_all(as_sequence(corrupted) or ())
        case ValueKind.MAPPING:
            container = as_mapping(corrupted) or {}
            wrapped = find_wrapped_sequence(container)
            if wrapped is not None:
                return _extract_all(wrapped)
            return _extract_all((container,))
        case _:
            return []


def extract_item(candidate: object) -> ExtractedItem | None:
    """Extract one item, or ``None`` when it carries no description."""

    mapping = as_mapping(candidate)
    if mapping is None:
        return None

    description = scan_description(mapping)
    if description is None:
        return None

    passes = scan_passes(mapping)
    return ExtractedItem(description=description, passes=bool(passes))


def _extract_all(candidates: Iterable[object]) -> list[ExtractedItem]:
    items: list[ExtractedItem] = []
    for candidate in candidates:
        extracted = extract_item(candidate)
        if extracted is not None:
            items.append(extracted)
    return items


__all__ = ["extract_item", "extract_items"]
