"""``@{path}`` inclusion markers, expanded to file contents.

Works like curl's ``@file`` syntax. Expansion never fails outward: a marker
that cannot be resolved is replaced with a bracketed diagnostic so the
surrounding document stays well formed.
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from ralph_prd.domain.models import PrdEntry
from ralph_prd.utils.fs import PathLike

FILE_REFERENCE_RE: Final[re.Pattern[str]] = re.compile(r"@\{([^}]+)\}")


def expand_file_references(text: str, base_dir: PathLike) -> str:
    """Replace every ``@{path}`` marker in ``text`` with the file it names.

    Relative paths resolve against ``base_dir``.
    """

    def _substitute(match: re.Match[str]) -> str:
        return _read_reference(match.group(1), base_dir)

    return FILE_REFERENCE_RE.sub(_substitute, text)


def expand_prd_file_references(entries: Sequence[PrdEntry], base_dir: PathLike) -> list[PrdEntry]:
    """Expand markers in every description and step; ``entries`` is not modified."""

    return [
        PrdEntry(
            category=entry.category,
            description=expand_file_references(entry.description, base_dir),
            steps=[expand_file_references(step, base_dir) for step in entry.steps],
            passes=entry.passes,
        )
        for entry in entries
    ]


def resolve_reference(reference: str, base_dir: PathLike) -> str:
    if Path(reference).is_absolute():
        return reference
    return os.path.normpath(os.path.join(os.fspath(base_dir), reference))


def _read_reference(reference: str, base_dir: PathLike) -> str:
    full_path = resolve_reference(reference, base_dir)
    try:
        if not Path(full_path).exists():
            return f"[File not found: {full_path}]"
        return Path(full_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError, ValueError):
        return f"[Error reading: {full_path}]"


__all__ = [
    "FILE_REFERENCE_RE",
    "expand_file_references",
    "expand_prd_file_references",
    "resolve_reference",
]
