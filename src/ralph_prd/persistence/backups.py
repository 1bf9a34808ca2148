"""Timestamped sibling backups of the PRD file.

Backups are named ``backup.prd.<timestamp><ext>`` where the timestamp is an
ISO-8601 UTC instant with ``:`` and ``.`` replaced by ``-``. Those names sort
lexicographically in creation order, so "latest" is a plain descending sort.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ralph_prd.constants import BACKUP_EXTENSIONS, BACKUP_PREFIX, YAML_EXTENSIONS
from ralph_prd.utils.fs import PathLike, atomic_write, lower_suffix

logger = logging.getLogger(__name__)


def backup_timestamp(now: datetime | None = None) -> str:
    """Filename-safe ISO-8601 UTC timestamp with millisecond precision."""

    moment = datetime.now(UTC) if now is None else now
    if moment.tzinfo is None or moment.utcoffset() is None:
        moment = moment.replace(tzinfo=UTC)
    else:
        moment = moment.astimezone(UTC)
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def backup_path_for(prd_path: PathLike, now: datetime | None = None) -> Path:
    source = Path(prd_path)
    suffix = lower_suffix(source)
    extension = suffix if suffix in YAML_EXTENSIONS else ".json"
    return source.parent / f"{BACKUP_PREFIX}{backup_timestamp(now)}{extension}"


def create_backup(prd_path: PathLike, *, now: datetime | None = None) -> Path:
    """Copy the current on-disk bytes of ``prd_path`` into a new backup file.

    The source is left untouched. Read and write failures propagate.
    """

    content = Path(prd_path).read_bytes()
    destination = backup_path_for(prd_path, now)
    atomic_write(destination, content)
    logger.info("created PRD backup %s", destination)
    return destination


def list_backups(prd_path: PathLike) -> list[Path]:
    """Backups beside ``prd_path``, newest first."""

    directory = Path(prd_path).parent
    if not directory.is_dir():
        return []

    names = sorted(
        (
            child.name
            for child in directory.iterdir()
            if child.name.startswith(BACKUP_PREFIX) and child.name.endswith(BACKUP_EXTENSIONS)
        ),
        reverse=True,
    )
    return [directory / name for name in names]


def find_latest_backup(prd_path: PathLike) -> Path | None:
    backups = list_backups(prd_path)
    if not backups:
        return None
    return backups[0]


__all__ = [
    "backup_path_for",
    "backup_timestamp",
    "create_backup",
    "find_latest_backup",
    "list_backups",
]
