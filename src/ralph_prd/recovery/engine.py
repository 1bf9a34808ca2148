"""Whole-document reconstruction from a malformed PRD.

Recovery is all or nothing. A single element that cannot be rebuilt into a
schema-valid entry voids the attempt, which is deliberately stricter than
:func:`ralph_prd.recovery.extractor.extract_items`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ralph_prd.constants import DEFAULT_RECOVERED_STEP, FALSY_TOKENS
from ralph_prd.domain.models import PrdEntry
from ralph_prd.domain.values import ValueKind, as_mapping, as_sequence, kind_of
from ralph_prd.recovery.fields import (
    find_wrapped_sequence,
    scan_category,
    scan_description,
    scan_passes,
    scan_steps,
)

logger = logging.getLogger(__name__)


def attempt_recovery(corrupted: object) -> list[PrdEntry] | None:
    """Return a fully valid document rebuilt from ``corrupted``, or ``None``."""

    match kind_of(corrupted):
        case ValueKind.MAPPING:
            wrapped = find_wrapped_sequence(as_mapping(corrupted) or {})
            if wrapped is None:
                logger.debug("recovery failed: no wrapper key holds an array")
                return None
            return _recover_array(wrapped)
        case ValueKind.SEQUENCE:
            return _recover_array(as_sequence(corrupted) or ())
        case kind:
            logger.debug("recovery failed: top-level value is %s", kind.value)
            return None


def _recover_array(items: Sequence[object]) -> list[PrdEntry] | None:
    recovered: list[PrdEntry] = []

    for index, item in enumerate(items, start=1):
        entry = _recover_entry(item)
        if entry is None:
            logger.debug("recovery failed: item %d could not be rebuilt", index)
            return None
        recovered.append(entry)

    if not recovered:
        return None
    return recovered


def _recover_entry(item: object) -> PrdEntry | None:
    candidate = as_mapping(item)
    if candidate is None:
        return None

    category = scan_category(candidate)
    description = scan_description(candidate)
    if category is None or description is None:
        return None

    steps = scan_steps(candidate)
    passes = scan_passes(candidate, falsy_tokens=FALSY_TOKENS)

    return PrdEntry(
        category=category,
        description=description,
        steps=steps if steps is not None else [DEFAULT_RECOVERED_STEP],
        passes=bool(passes),
    )


__all__ = ["attempt_recovery"]
