"""Filesystem helpers."""

from ralph_prd.utils.fs import PathLike, atomic_write, lower_suffix

__all__ = ["PathLike", "atomic_write", "lower_suffix"]
