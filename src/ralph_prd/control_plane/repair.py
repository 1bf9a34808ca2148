"""
ralph-prd — repair workflows

Purpose
- Drive the validator, recovery engine, merge engine, and backup manager
  through the repair sequences the CLI and the agent run loop rely on.

Functional requirements
- ``fix_prd``: validate; on failure back up the on-disk bytes, try whole
  document recovery, optionally fall back to an earlier backup, and finally
  install a bootstrap template that points the agent at the backup.
- ``restore_from_backup``: replace the PRD with a validated backup, backing
  up the current file first.
- ``guard_after_iteration``: after an agent iteration, keep the trusted
  baseline structure while forwarding completion claims from a corrupted
  rewrite.

Non-functional requirements
- A backup is always taken before the PRD is overwritten.
- Every write replaces the whole file.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from ralph_prd.domain.models import PrdEntry, entries_to_payload
from ralph_prd.persistence.backups import create_backup, list_backups
from ralph_prd.persistence.prd_io import read_prd_file, write_prd_auto
from ralph_prd.persistence.templates import DEFAULT_PRD_LOCATION, create_template_prd
from ralph_prd.recovery.engine import attempt_recovery
from ralph_prd.recovery.merge import smart_merge
from ralph_prd.utils.fs import PathLike
from ralph_prd.validation.validator import validate_prd

logger = logging.getLogger(__name__)


class PrdRepairError(ValueError):
    """Raised when a repair workflow is invoked on something it cannot act on."""


class RepairOutcome(StrEnum):
    VALID = "valid"
    INVALID = "invalid"
    UNPARSEABLE = "unparseable"
    RECOVERED = "recovered"
    RESTORED = "restored"
    RESET = "reset"
    RESTORE_FAILED = "restore_failed"


_FAILED_OUTCOMES = frozenset(
    {RepairOutcome.INVALID, RepairOutcome.UNPARSEABLE, RepairOutcome.RESTORE_FAILED}
)


@dataclass(frozen=True, slots=True)
class RepairReport:
    """What a repair workflow found and did."""

    outcome: RepairOutcome
    prd_path: Path
    entries: int = 0
    errors: tuple[str, ...] = ()
    backup_path: Path | None = None
    restored_from: Path | None = None

    @property
    def ok(self) -> bool:
        return self.outcome not in _FAILED_OUTCOMES

    @property
    def changed(self) -> bool:
        return self.outcome in {
            RepairOutcome.RECOVERED,
            RepairOutcome.RESTORED,
            RepairOutcome.RESET,
        }


@dataclass(frozen=True, slots=True)
class GuardResult:
    recovered: bool
    items_updated: int = 0
    warnings: tuple[str, ...] = ()


def fix_prd(
    prd_path: PathLike,
    *,
    verify_only: bool = False,
    restore_previous: bool = False,
    prd_location: str = DEFAULT_PRD_LOCATION,
    now: datetime | None = None,
) -> RepairReport:
    """Check ``prd_path`` and repair it in place unless ``verify_only`` is set."""

    path = Path(prd_path)
    if not path.exists():
        raise PrdRepairError(f"PRD file not found: {path}")

    parsed = read_prd_file(path)
    if parsed is None:
        logger.warning("PRD file %s could not be parsed", path)
        if verify_only:
            return RepairReport(outcome=RepairOutcome.UNPARSEABLE, prd_path=path)
        backup_path = create_backup(path, now=now)
        return _restore_or_reset(
            path,
            backup_path,
            errors=(),
            restore_previous=restore_previous,
            prd_location=prd_location,
        )

    validation = validate_prd(parsed.content)
    if validation.data is not None:
        return RepairReport(
            outcome=RepairOutcome.VALID,
            prd_path=path,
            entries=len(validation.data),
        )

    logger.warning("PRD %s is invalid: %d error(s)", path, len(validation.errors))
    if verify_only:
        return RepairReport(
            outcome=RepairOutcome.INVALID,
            prd_path=path,
            errors=validation.errors,
        )

    backup_path = create_backup(path, now=now)

    recovered = attempt_recovery(parsed.content)
    if recovered is not None and validate_prd(entries_to_payload(recovered)).valid:
        write_prd_auto(path, recovered)
        logger.info("recovered %d PRD entries by unwrapping/remapping fields", len(recovered))
        return RepairReport(
            outcome=RepairOutcome.RECOVERED,
            prd_path=path,
            entries=len(recovered),
            errors=validation.errors,
            backup_path=backup_path,
        )

    logger.info("direct recovery of %s failed", path)
    return _restore_or_reset(
        path,
        backup_path,
        errors=validation.errors,
        restore_previous=restore_previous,
        prd_location=prd_location,
    )


def restore_from_backup(prd_path: PathLike, backup_path: PathLike) -> RepairReport:
    """Replace the PRD with the entries of a validated backup."""

    path = Path(prd_path)
    source = Path(backup_path)
    if not source.exists():
        return RepairReport(
            outcome=RepairOutcome.RESTORE_FAILED,
            prd_path=path,
            errors=(f"Backup file not found: {source}",),
        )

    entries, errors = _load_backup(source)
    if entries is None:
        return RepairReport(outcome=RepairOutcome.RESTORE_FAILED, prd_path=path, errors=errors)

    current_backup = create_backup(path) if path.exists() else None
    write_prd_auto(path, entries)
    logger.info("restored %s from %s", path, source)
    return RepairReport(
        outcome=RepairOutcome.RESTORED,
        prd_path=path,
        entries=len(entries),
        backup_path=current_backup,
        restored_from=source,
    )


def resolve_backup_path(backup_arg: str, ralph_dir: PathLike) -> Path:
    """Absolute paths as given; bare names inside ``ralph_dir`` when present; else cwd."""

    candidate = Path(backup_arg)
    if candidate.is_absolute():
        return candidate
    in_ralph_dir = Path(ralph_dir) / candidate
    if in_ralph_dir.exists():
        return in_ralph_dir
    return Path.cwd() / candidate


def guard_after_iteration(prd_path: PathLike, baseline: Sequence[PrdEntry]) -> GuardResult:
    """Re-check the PRD after an agent iteration against the trusted ``baseline``.

    Unparseable files are restored from the baseline. Structurally invalid
    files are replaced by the baseline with completion claims merged in.
    """

    path = Path(prd_path)
    parsed = read_prd_file(path)
    if parsed is None:
        logger.warning("PRD %s corrupted (unparseable); restored from baseline", path)
        write_prd_auto(path, [entry.copy() for entry in baseline])
        return GuardResult(recovered=True)

    if validate_prd(parsed.content).valid:
        return GuardResult(recovered=False)

    merge = smart_merge(baseline, parsed.content)
    write_prd_auto(path, merge.merged)
    logger.warning(
        "PRD %s format corrupted; restored baseline structure with %d merged flag(s)",
        path,
        merge.items_updated,
    )
    for warning in merge.warnings:
        logger.warning(warning)
    return GuardResult(
        recovered=True,
        items_updated=merge.items_updated,
        warnings=merge.warnings,
    )


def _restore_or_reset(
    path: Path,
    backup_path: Path,
    *,
    errors: tuple[str, ...],
    restore_previous: bool,
    prd_location: str,
) -> RepairReport:
    if restore_previous:
        previous = next((item for item in list_backups(path) if item != backup_path), None)
        if previous is not None:
            entries, _ = _load_backup(previous)
            if entries is not None:
                write_prd_auto(path, entries)
                logger.warning("restored %s from %s; recent changes may be lost", path, previous)
                return RepairReport(
                    outcome=RepairOutcome.RESTORED,
                    prd_path=path,
                    entries=len(entries),
                    errors=errors,
                    backup_path=backup_path,
                    restored_from=previous,
                )
            logger.info("previous backup %s is also invalid", previous)

    template = create_template_prd(backup_path, prd_location=prd_location)
    write_prd_auto(path, template)
    logger.warning("reset %s to recovery template referencing %s", path, backup_path)
    return RepairReport(
        outcome=RepairOutcome.RESET,
        prd_path=path,
        entries=len(template),
        errors=errors,
        backup_path=backup_path,
    )


def _load_backup(source: Path) -> tuple[list[PrdEntry] | None, tuple[str, ...]]:
    parsed = read_prd_file(source)
    if parsed is None:
        return None, (f"Backup file could not be parsed: {source}",)
    validation = validate_prd(parsed.content)
    if validation.data is None:
        return None, validation.errors
    return validation.data, ()


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
