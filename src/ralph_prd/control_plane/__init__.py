"""Repair workflows composed from validation, recovery, merge, and backups."""

from ralph_prd.control_plane.repair import (
    GuardResult,
    PrdRepairError,
    RepairOutcome,
    RepairReport,
    fix_prd,
    guard_after_iteration,
    resolve_backup_path,
    restore_from_backup,
)

__all__ = [
    "GuardResult",
    "PrdRepairError",
    "RepairOutcome",
    "RepairReport",
    "fix_prd",
    "guard_after_iteration",
    "resolve_backup_path",
    "restore_from_backup",
]
