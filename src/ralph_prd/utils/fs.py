"""
ralph-prd — filesystem utilities

Purpose
- Whole-file replacement for PRD documents, backups, and task files.

Functional requirements
- Writes go to a temp file in the destination directory and replace the
  target in one step, so readers never observe a half-written document.
- Failures propagate to the caller; the temp file is removed.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "PathLike",
    "atomic_write",
    "lower_suffix",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically replace ``path`` with ``data``.

    1. create temp file beside the target,
    2. write + flush + fsync,
    3. ``os.replace`` onto the target.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        payload = data if isinstance(data, bytes) else data.encode(encoding)
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def lower_suffix(path: PathLike) -> str:
    """Lower-cased final suffix of ``path`` (``""`` when there is none)."""

    return Path(path).suffix.lower()


def _fsync_directory(path: Path) -> None:
    """Best-effort directory fsync; unsupported on some platforms."""

    if os.name == "nt":
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(path, flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        return
    finally:
        os.close(dir_fd)
