"""Format-aware reading and writing of PRD documents.

Readers never raise on bad input: a file that cannot be read or decoded comes
back as ``None`` so the caller can route it into backup-and-repair. Writers
replace the whole file in one step and let I/O errors propagate.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import yaml

from ralph_prd.constants import YAML_EXTENSIONS
from ralph_prd.domain.models import PrdEntry, entries_to_payload
from ralph_prd.utils.fs import PathLike, atomic_write, lower_suffix

logger = logging.getLogger(__name__)

_YAML_NO_WRAP_WIDTH: Final[int] = 2**30


@dataclass(frozen=True, slots=True)
class ParsedPrd:
    """Decoded document content alongside the raw text it came from."""

    content: object
    raw: str


def is_yaml_path(path: PathLike) -> bool:
    return lower_suffix(path) in YAML_EXTENSIONS


def read_prd_file(path: PathLike) -> ParsedPrd | None:
    """Read and decode ``path`` as YAML for ``.yaml``/``.yml``, else JSON."""

    if is_yaml_path(path):
        return read_yaml_prd_file(path)
    return _read_with(path, json.loads, json.JSONDecodeError)


def read_yaml_prd_file(path: PathLike) -> ParsedPrd | None:
    """Read and decode ``path`` as YAML regardless of its extension."""

    return _read_with(path, yaml.safe_load, yaml.YAMLError)


def serialize_prd(entries: Sequence[PrdEntry]) -> str:
    """Exact JSON text written by :func:`write_prd`."""

    return json.dumps(entries_to_payload(list(entries)), indent=2, ensure_ascii=False) + "\n"


def serialize_prd_yaml(entries: Sequence[PrdEntry]) -> str:
    rendered = yaml.safe_dump(
        entries_to_payload(list(entries)),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=_YAML_NO_WRAP_WIDTH,
    )
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    return rendered


def write_prd(path: PathLike, entries: Sequence[PrdEntry]) -> None:
    """Overwrite ``path`` with ``entries`` as two-space-indented JSON."""

    atomic_write(path, serialize_prd(entries))


def write_prd_yaml(path: PathLike, entries: Sequence[PrdEntry]) -> None:
    atomic_write(path, serialize_prd_yaml(entries))


def write_prd_auto(path: PathLike, entries: Sequence[PrdEntry]) -> None:
    """Write YAML for YAML extensions and JSON for everything else."""

    if is_yaml_path(path):
        write_prd_yaml(path, entries)
    else:
        write_prd(path, entries)


def _read_with(
    path: PathLike,
    decode: Callable[[str], object],
    decode_error: type[Exception],
) -> ParsedPrd | None:
    target = Path(path)
    try:
        raw = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("unable to read PRD file %s: %s", target, exc)
        return None

    try:
        content = decode(raw)
    except (decode_error, ValueError, RecursionError) as exc:
        logger.debug("unable to decode PRD file %s: %s", target, exc)
        return None

    return ParsedPrd(content=content, raw=raw)


__all__ = [
    "ParsedPrd",
    "is_yaml_path",
    "read_prd_file",
    "read_yaml_prd_file",
    "serialize_prd",
    "serialize_prd_yaml",
    "write_prd",
    "write_prd_auto",
    "write_prd_yaml",
]
