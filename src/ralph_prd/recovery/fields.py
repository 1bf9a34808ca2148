"""Ordered synonym scans shared by extraction and recovery.

Each scan walks its key tuple front to back and stops at the first usable
value. The order is a priority: a later synonym is never consulted once an
earlier one matched.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ralph_prd.constants import (
    CATEGORY_KEYS,
    DESCRIPTION_KEYS,
    PASSES_KEYS,
    STEPS_KEYS,
    TRUTHY_TOKENS,
    WRAPPER_KEYS,
)
from ralph_prd.domain.models import is_category
from ralph_prd.domain.values import ValueKind, as_sequence, kind_of

Candidate = Mapping[object, object]


def find_wrapped_sequence(container: Candidate) -> Sequence[object] | None:
    """Return the value of the first wrapper key that holds a sequence.

    Later wrapper keys are ignored even when the first match is empty.
    """

    for key in WRAPPER_KEYS:
        wrapped = as_sequence(container.get(key))
        if wrapped is not None:
            return wrapped
    return None


def scan_description(candidate: Candidate) -> str | None:
    for key in DESCRIPTION_KEYS:
        value = candidate.get(key)
        if kind_of(value) is ValueKind.STRING and value:
            return value  # type: ignore[return-value]
    return None


def scan_category(candidate: Candidate) -> str | None:
    for key in CATEGORY_KEYS:
        value = candidate.get(key)
        if is_category(value):
            return value  # type: ignore[return-value]
    return None


def scan_steps(candidate: Candidate) -> list[str] | None:
    """First synonym holding an array with at least one string member."""

    for key in STEPS_KEYS:
        raw = as_sequence(candidate.get(key))
        if raw is None:
            continue
        steps = [item for item in raw if kind_of(item) is ValueKind.STRING]
        if steps:
            return steps  # type: ignore[return-value]
    return None


def scan_passes(
    candidate: Candidate,
    *,
    falsy_tokens: frozenset[str] = frozenset(),
) -> bool | None:
    """Resolve a completion flag, booleans first and string tokens second.

    Returns ``None`` when no synonym carries a recognizable signal.
    """

    for key in PASSES_KEYS:
        value = candidate.get(key)
        if kind_of(value) is ValueKind.BOOLEAN:
            return value  # type: ignore[return-value]

    for key in PASSES_KEYS:
        value = candidate.get(key)
        if kind_of(value) is not ValueKind.STRING:
            continue
        token = value.lower()  # type: ignore[union-attr]
        if token in TRUTHY_TOKENS:
            return True
        if token in falsy_tokens:
            return False
    return None


__all__ = [
    "Candidate",
    "find_wrapped_sequence",
    "scan_category",
    "scan_description",
    "scan_passes",
    "scan_steps",
]
