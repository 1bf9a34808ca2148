"""Tagged view over untyped values produced by JSON/YAML decoding.

Everything the recovery code touches arrives as ``object``. Rather than
probing types ad hoc, callers classify a value once with :func:`kind_of` and
branch on the resulting :class:`ValueKind`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import TypeAlias

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


class ValueKind(StrEnum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


def kind_of(value: object) -> ValueKind:
    """Classify a decoded value. Booleans are never reported as numbers."""

    match value:
        case None:
            return ValueKind.NULL
        case bool():
            return ValueKind.BOOLEAN
        case int() | float():
            return ValueKind.NUMBER
        case str():
            return ValueKind.STRING
        case Mapping():
            return ValueKind.MAPPING
        case list() | tuple():
            return ValueKind.SEQUENCE
        case _:
            return ValueKind.OTHER


def as_mapping(value: object) -> Mapping[object, object] | None:
    """Return ``value`` when it is a mapping, else ``None``."""

    if kind_of(value) is ValueKind.MAPPING:
        return value  # type: ignore[return-value]
    return None


def as_sequence(value: object) -> Sequence[object] | None:
    """Return ``value`` when it is a list/tuple, else ``None``."""

    if kind_of(value) is ValueKind.SEQUENCE:
        return value  # type: ignore[return-value]
    return None


def describe(value: object) -> str:
    """Short human-readable type label for diagnostics."""

    kind = kind_of(value)
    if kind is ValueKind.OTHER:
        return type(value).__name__
    return kind.value


__all__ = [
    "JSONScalar",
    "JSONValue",
    "ValueKind",
    "as_mapping",
    "as_sequence",
    "describe",
    "kind_of",
]
