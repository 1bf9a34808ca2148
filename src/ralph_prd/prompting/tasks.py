"""The filtered task file the agent works from, and syncing its results back.

Before an iteration the agent is handed ``prd-tasks.json``: only the
incomplete entries, with ``@{path}`` markers expanded. Agents sometimes mark
progress in that file instead of the PRD, so completed flags are forwarded
back afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ralph_prd.constants import TASKS_FILE
from ralph_prd.domain.models import PrdEntry
from ralph_prd.domain.values import ValueKind, as_mapping, as_sequence, kind_of
from ralph_prd.persistence.prd_io import read_prd_file, write_prd, write_prd_auto
from ralph_prd.prompting.references import expand_prd_file_references
from ralph_prd.utils.fs import PathLike
from ralph_prd.validation.validator import validate_prd

logger = logging.getLogger(__name__)


class TaskFileError(ValueError):
    """Raised when the PRD cannot be turned into a task file."""


@dataclass(frozen=True, slots=True)
class FilteredPrd:
    tasks_path: Path
    incomplete: int

    @property
    def has_incomplete(self) -> bool:
        return self.incomplete > 0


def load_valid_prd(prd_path: PathLike) -> list[PrdEntry]:
    """Read and validate ``prd_path``; raise ``TaskFileError`` on any problem."""

    parsed = read_prd_file(prd_path)
    if parsed is None:
        raise TaskFileError(f"{prd_path}: PRD file could not be parsed; run 'fix' to repair it")
    result = validate_prd(parsed.content)
    if not result.valid or result.data is None:
        first = result.errors[0] if result.errors else "unknown validation failure"
        raise TaskFileError(f"{prd_path}: PRD is invalid ({first}); run 'fix' to repair it")
    return result.data


def create_filtered_prd(
    prd_path: PathLike,
    base_dir: PathLike,
    *,
    category: str | None = None,
    tasks_file: str = TASKS_FILE,
) -> FilteredPrd:
    """Write the incomplete entries of ``prd_path`` to ``base_dir/tasks_file``."""

    entries = load_valid_prd(prd_path)
    pending = [entry for entry in entries if not entry.passes]
    if category is not None:
        pending = [entry for entry in pending if entry.category == category]

    tasks_path = Path(base_dir) / tasks_file
    write_prd(tasks_path, expand_prd_file_references(pending, base_dir))
    logger.debug("wrote %d pending task(s) to %s", len(pending), tasks_path)
    return FilteredPrd(tasks_path=tasks_path, incomplete=len(pending))


def sync_passes_from_tasks(tasks_path: PathLike, prd_path: PathLike) -> int:
    """Forward ``passes: true`` from the task file onto the PRD.

    Matching is by equal or contained description. Returns the number of PRD
    entries flipped to complete; unreadable or invalid files sync nothing.
    """

    if not Path(tasks_path).exists():
        return 0

    parsed_tasks = read_prd_file(tasks_path)
    parsed_prd = read_prd_file(prd_path)
    if parsed_tasks is None or parsed_prd is None:
        return 0
    tasks = as_sequence(parsed_tasks.content)
    validation = validate_prd(parsed_prd.content)
    if tasks is None or validation.data is None:
        return 0

    entries = validation.data
    synced = 0
    for task in tasks:
        description = _completed_description(task)
        if description is None:
            continue
        target = next(
            (
                entry
                for entry in entries
                if entry.description in description or description in entry.description
            ),
            None,
        )
        if target is not None and not target.passes:
            target.passes = True
            synced += 1

    if synced:
        write_prd_auto(prd_path, entries)
        logger.info("synced %d completed item(s) from %s", synced, tasks_path)
    return synced


def _completed_description(task: object) -> str | None:
    mapping = as_mapping(task)
    if mapping is None or mapping.get("passes") is not True:
        return None
    description = mapping.get("description")
    if kind_of(description) is not ValueKind.STRING or not description:
        return None
    return description  # type: ignore[return-value]


__all__ = [
    "FilteredPrd",
    "TaskFileError",
    "create_filtered_prd",
    "load_valid_prd",
    "sync_passes_from_tasks",
]
