"""Dataclass value types for PRD entries and the results of checking them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import NoReturn

from ralph_prd.constants import CATEGORIES
from ralph_prd.domain.values import JSONValue, ValueKind, as_sequence, describe, kind_of

_CATEGORY_SET: frozenset[str] = frozenset(CATEGORIES)


class Category(StrEnum):
    UI = "ui"
    FEATURE = "feature"
    BUGFIX = "bugfix"
    SETUP = "setup"
    DEVELOPMENT = "development"
    TESTING = "testing"
    DOCS = "docs"


def is_category(value: object) -> bool:
    """Return whether ``value`` is a string in the closed category vocabulary."""

    return kind_of(value) is ValueKind.STRING and value in _CATEGORY_SET


@dataclass(slots=True)
class PrdEntry:
    """One task in the requirements document."""

    category: str
    description: str
    steps: list[str] = field(default_factory=list)
    passes: bool = False

    def __post_init__(self) -> None:
        if not is_category(self.category):
            _fail("PrdEntry.category", f"invalid category {self.category!r}")
        if kind_of(self.description) is not ValueKind.STRING or not self.description:
            _fail("PrdEntry.description", "expected non-empty string")
        if not isinstance(self.steps, list):
            _fail("PrdEntry.steps", f"expected array, got {describe(self.steps)}")
        for index, step in enumerate(self.steps, start=1):
            if kind_of(step) is not ValueKind.STRING:
                _fail(f"PrdEntry.steps[{index}]", f"expected string, got {describe(step)}")
        if kind_of(self.passes) is not ValueKind.BOOLEAN:
            _fail("PrdEntry.passes", f"expected boolean, got {describe(self.passes)}")

    def copy(self) -> PrdEntry:
        """Return an independent copy; the ``steps`` list is never shared."""

        return PrdEntry(
            category=self.category,
            description=self.description,
            steps=list(self.steps),
            passes=self.passes,
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "category": str(self.category),
            "description": self.description,
            "steps": list(self.steps),
            "passes": self.passes,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> PrdEntry:
        """Build an entry from a mapping that already satisfies the schema.

        Raises ``ValueError`` naming the offending field otherwise.
        """

        if kind_of(payload) is not ValueKind.MAPPING:
            _fail("PrdEntry", f"expected object, got {describe(payload)}")

        raw_steps = as_sequence(payload.get("steps"))
        if raw_steps is None:
            _fail("PrdEntry.steps", f"expected array, got {describe(payload.get('steps'))}")

        return cls(
            category=payload.get("category"),  # type: ignore[arg-type]
            description=payload.get("description"),  # type: ignore[arg-type]
            steps=list(raw_steps),  # type: ignore[arg-type]
            passes=payload.get("passes"),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a strict schema check; ``data`` is set only when valid."""

    valid: bool
    errors: tuple[str, ...] = ()
    data: list[PrdEntry] | None = None


@dataclass(frozen=True, slots=True)
class ExtractedItem:
    """Minimal fact salvaged from untrusted input."""

    description: str
    passes: bool


@dataclass(frozen=True, slots=True)
class MergeResult:
    merged: list[PrdEntry]
    items_updated: int
    warnings: tuple[str, ...] = ()


def entries_to_payload(entries: list[PrdEntry]) -> list[dict[str, JSONValue]]:
    """Serialize a document to plain JSON-compatible data."""

    return [entry.to_dict() for entry in entries]


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


__all__ = [
    "Category",
    "ExtractedItem",
    "MergeResult",
    "PrdEntry",
    "ValidationResult",
    "entries_to_payload",
    "is_category",
]
