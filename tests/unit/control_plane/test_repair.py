"""
ralph-prd — unit tests for the repair workflows

Purpose
- Exercise fix/restore/guard end to end against real files in ``tmp_path``.
- A backup is taken before every write; repaired files keep their format.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from ralph_prd.control_plane import (
    PrdRepairError,
    RepairOutcome,
    fix_prd,
    guard_after_iteration,
    resolve_backup_path,
    restore_from_backup,
)
from ralph_prd.domain.models import PrdEntry
from ralph_prd.persistence import list_backups, read_prd_file, write_prd, write_prd_yaml
from ralph_prd.validation import validate_prd

_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def _valid() -> list[PrdEntry]:
    return [
        PrdEntry("feature", "Add login", ["Sign in"], False),
        PrdEntry("testing", "Cover merge engine", ["Run pytest"], True),
    ]


def _entries(path: Path) -> list[PrdEntry] | None:
    parsed = read_prd_file(path)
    if parsed is None:
        return None
    return validate_prd(parsed.content).data


@pytest.mark.unit
def test_valid_prd_is_left_alone(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    write_prd(prd, _valid())
    before = prd.read_bytes()

    report = fix_prd(prd)

    assert report.outcome is RepairOutcome.VALID
    assert report.entries == 2
    assert report.ok and not report.changed
    assert prd.read_bytes() == before
    assert list_backups(prd) == []


@pytest.mark.unit
def test_missing_prd_raises(tmp_path: Path) -> None:
    with pytest.raises(PrdRepairError, match="not found"):
        fix_prd(tmp_path / "prd.json")


@pytest.mark.unit
def test_verify_only_reports_without_writing(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text(json.dumps({"features": [{"name": "x"}]}), encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{nope", encoding="utf-8")

    invalid = fix_prd(prd, verify_only=True)
    unparseable = fix_prd(broken, verify_only=True)

    assert invalid.outcome is RepairOutcome.INVALID
    assert invalid.errors == ("PRD must be an array",)
    assert not invalid.ok
    assert unparseable.outcome is RepairOutcome.UNPARSEABLE
    assert list_backups(prd) == []


@pytest.mark.unit
def test_wrapped_prd_is_recovered_after_backup(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    original = json.dumps({"tasks": [{"title": "A", "type": "bugfix", "done": True}]})
    prd.write_text(original, encoding="utf-8")

    report = fix_prd(prd, now=_NOW)

    assert report.outcome is RepairOutcome.RECOVERED
    assert report.changed
    assert report.backup_path == tmp_path / "backup.prd.2024-05-01T12-00-00-000Z.json"
    assert report.backup_path.read_text(encoding="utf-8") == original
    recovered = _entries(prd)
    assert recovered is not None
    assert [(entry.category, entry.description, entry.passes) for entry in recovered] == [
        ("bugfix", "A", True)
    ]


@pytest.mark.unit
def test_unrecoverable_prd_is_reset_to_template(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text("{definitely not json", encoding="utf-8")

    report = fix_prd(prd, now=_NOW, prd_location="custom/prd.json")

    assert report.outcome is RepairOutcome.RESET
    assert report.backup_path is not None
    template = _entries(prd)
    assert template is not None and len(template) == 1
    assert template[0].description == "Fix the PRD entries"
    assert f"@{{{report.backup_path}}}" in template[0].steps[0]
    assert "custom/prd.json" in template[0].steps[1]


@pytest.mark.unit
def test_restore_previous_uses_earlier_valid_backup(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    write_prd(prd, _valid())
    earlier = tmp_path / "backup.prd.2024-04-01T00-00-00-000Z.json"
    earlier.write_bytes(prd.read_bytes())
    prd.write_text('[{"category": "nonsense"}]', encoding="utf-8")

    report = fix_prd(prd, restore_previous=True, now=_NOW)

    assert report.outcome is RepairOutcome.RESTORED
    assert report.restored_from == earlier
    assert _entries(prd) == _valid()


@pytest.mark.unit
def test_restore_previous_falls_back_to_template_when_backup_invalid(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    (tmp_path / "backup.prd.2024-04-01T00-00-00-000Z.json").write_text("[{}]", encoding="utf-8")
    prd.write_text('[{"category": "nonsense"}]', encoding="utf-8")

    report = fix_prd(prd, restore_previous=True, now=_NOW)

    assert report.outcome is RepairOutcome.RESET


@pytest.mark.unit
def test_without_restore_previous_backups_are_not_consulted(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    write_prd(prd, _valid())
    (tmp_path / "backup.prd.2024-04-01T00-00-00-000Z.json").write_bytes(prd.read_bytes())
    prd.write_text('[{"category": "nonsense"}]', encoding="utf-8")

    assert fix_prd(prd, now=_NOW).outcome is RepairOutcome.RESET


@pytest.mark.unit
def test_yaml_prd_is_repaired_as_yaml(tmp_path: Path) -> None:
    prd = tmp_path / "prd.yaml"
    prd.write_text("features:\n  - category: ui\n    name: Header\n    done: true\n", encoding="utf-8")

    report = fix_prd(prd, now=_NOW)

    assert report.outcome is RepairOutcome.RECOVERED
    assert report.backup_path is not None and report.backup_path.suffix == ".yaml"
    assert prd.read_text(encoding="utf-8").startswith("- category: ui")


@pytest.mark.unit
def test_restore_from_backup_backs_up_current_file(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text("{garbage", encoding="utf-8")
    backup = tmp_path / "saved.yaml"
    write_prd_yaml(backup, _valid())

    report = restore_from_backup(prd, backup)

    assert report.outcome is RepairOutcome.RESTORED
    assert report.restored_from == backup
    assert report.backup_path is not None
    assert report.backup_path.read_text(encoding="utf-8") == "{garbage"
    assert _entries(prd) == _valid()


@pytest.mark.unit
def test_restore_from_missing_or_invalid_backup_fails(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    write_prd(prd, _valid())
    invalid = tmp_path / "invalid.json"
    invalid.write_text('[{"category": "ui"}]', encoding="utf-8")

    missing = restore_from_backup(prd, tmp_path / "absent.json")
    rejected = restore_from_backup(prd, invalid)

    assert missing.outcome is RepairOutcome.RESTORE_FAILED
    assert missing.errors[0].startswith("Backup file not found")
    assert rejected.outcome is RepairOutcome.RESTORE_FAILED
    assert rejected.errors[0].startswith("Item 1:")
    assert _entries(prd) == _valid()
    assert list_backups(prd) == []


@pytest.mark.unit
def test_resolve_backup_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ralph_dir = tmp_path / ".ralph"
    ralph_dir.mkdir()
    (ralph_dir / "inside.json").write_text("[]", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert resolve_backup_path("/abs/b.json", ralph_dir) == Path("/abs/b.json")
    assert resolve_backup_path("inside.json", ralph_dir) == ralph_dir / "inside.json"
    assert resolve_backup_path("outside.json", ralph_dir) == Path.cwd() / "outside.json"


@pytest.mark.unit
def test_guard_leaves_valid_prd(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    write_prd(prd, _valid())

    assert not guard_after_iteration(prd, _valid()).recovered


@pytest.mark.unit
def test_guard_restores_unparseable_prd_from_baseline(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text("{half written", encoding="utf-8")

    result = guard_after_iteration(prd, _valid())

    assert result.recovered
    assert result.items_updated == 0
    assert _entries(prd) == _valid()


@pytest.mark.unit
def test_guard_merges_claims_from_corrupted_rewrite(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text(
        json.dumps(
            {
                "features": [
                    {"name": "Add login", "status": "done"},
                    {"name": "Something the agent invented", "passes": True},
                ]
            }
        ),
        encoding="utf-8",
    )
    baseline = _valid()

    result = guard_after_iteration(prd, baseline)

    assert result.recovered
    assert result.items_updated == 1
    assert len(result.warnings) == 1
    merged = _entries(prd)
    assert merged is not None
    assert [entry.passes for entry in merged] == [True, True]
    assert baseline[0].passes is False


@pytest.mark.unit
def test_deeply_nested_prd_is_reset_to_template(tmp_path: Path) -> None:
    prd = tmp_path / "prd.json"
    prd.write_text("[" * 200_000 + "]" * 200_000, encoding="utf-8")

    report = fix_prd(prd, now=_NOW)

    assert report.outcome is RepairOutcome.RESET
    assert report.backup_path is not None
    assert _entries(prd) is not None
