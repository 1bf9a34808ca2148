"""
ralph-prd — CLI subprocess smoke contracts

Purpose
- Enforce CLI behavior for `python -m ralph_prd` against real PRD files on disk.
- Verify exit codes, command output signals, and file side effects (repairs, backups, task files).
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

pytestmark = pytest.mark.integration

_VALID_PRD = [
    {"category": "feature", "description": "Add login page", "steps": ["Sign in"], "passes": False},
    {"category": "bugfix", "description": "Fix crash on save", "steps": ["Save"], "passes": True},
]


def _run_cli(repo_root: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    env["NO_COLOR"] = "1"
    env["PYTHONIOENCODING"] = "utf-8"
    for name in list(env):
        if name.startswith("RALPH_"):
            del env[name]
    return subprocess.run(
        [sys.executable, "-m", "ralph_prd", *args],
        cwd=repo_root,
        encoding="utf-8",
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


def _seed_prd(repo_root: Path, document: object = None) -> Path:
    prd = repo_root / ".ralph" / "prd.json"
    _write(prd, json.dumps(_VALID_PRD if document is None else document, indent=2))
    return prd


def test_version_flag(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "--version")

    assert completed.returncode == 0
    assert completed.stdout.startswith("ralph-prd ")


def test_missing_command_prints_help(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path)

    assert completed.returncode == 2
    assert "usage: ralph-prd" in completed.stderr


def test_validate_valid_prd(tmp_path: Path) -> None:
    _seed_prd(tmp_path)

    completed = _run_cli(tmp_path, "validate")

    assert completed.returncode == 0, completed.stderr
    assert "✓ PRD is valid." in completed.stdout
    assert "2 entries found." in completed.stdout


def test_validate_json_reports_errors(tmp_path: Path) -> None:
    _seed_prd(tmp_path, [{"category": "nonsense", "description": "x", "steps": [], "passes": False}])

    completed = _run_cli(tmp_path, "validate", "--json")

    assert completed.returncode == 1
    payload = json.loads(completed.stdout)
    assert payload["command"] == "validate"
    assert payload["valid"] is False
    assert payload["entries"] == 0
    assert payload["errors"][0].startswith("Item 1:")


def test_validate_without_prd_fails(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "validate")

    assert completed.returncode == 1
    assert completed.stderr.startswith("error: PRD file not found")


def test_fix_recovers_wrapped_prd_and_keeps_backup(tmp_path: Path) -> None:
    prd = _seed_prd(
        tmp_path,
        {"features": [{"category": "feature", "name": "Add login page", "done": True}]},
    )

    completed = _run_cli(tmp_path, "fix")

    assert completed.returncode == 0, completed.stderr
    assert "Checking PRD structure..." in completed.stdout
    assert "✓ PRD recovered successfully!" in completed.stdout
    repaired = json.loads(prd.read_text(encoding="utf-8"))
    assert repaired[0]["description"] == "Add login page"
    assert repaired[0]["passes"] is True

    backups = _run_cli(tmp_path, "backups")
    assert backups.returncode == 0
    assert "1 backup(s), newest first:" in backups.stdout
    assert ".ralph/backup.prd." in backups.stdout


def test_fix_verify_does_not_write(tmp_path: Path) -> None:
    prd = _seed_prd(tmp_path, {"features": [{"name": "x"}]})
    before = prd.read_text(encoding="utf-8")

    completed = _run_cli(tmp_path, "fix", "--verify")

    assert completed.returncode == 1
    assert "✗ PRD structure is invalid:" in completed.stdout
    assert "PRD must be an array" in completed.stdout
    assert prd.read_text(encoding="utf-8") == before
    assert not list((tmp_path / ".ralph").glob("backup.prd.*"))


def test_fix_without_prd_fails(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "fix")

    assert completed.returncode == 1
    assert "Create the PRD before running fix." in completed.stderr


def test_fix_restores_named_backup(tmp_path: Path) -> None:
    prd = _seed_prd(tmp_path, "not a prd")
    _write(tmp_path / ".ralph" / "good.json", json.dumps(_VALID_PRD))

    completed = _run_cli(tmp_path, "fix", "good.json")

    assert completed.returncode == 0, completed.stderr
    assert "✓ PRD restored from: .ralph/good.json" in completed.stdout
    assert json.loads(prd.read_text(encoding="utf-8")) == _VALID_PRD


def test_tasks_then_sync(tmp_path: Path) -> None:
    prd = _seed_prd(tmp_path)

    tasks = _run_cli(tmp_path, "tasks")

    assert tasks.returncode == 0, tasks.stderr
    assert "Wrote 1 pending task(s) to .ralph/prd-tasks.json" in tasks.stdout
    tasks_path = tmp_path / ".ralph" / "prd-tasks.json"
    pending = json.loads(tasks_path.read_text(encoding="utf-8"))
    assert [task["description"] for task in pending] == ["Add login page"]

    pending[0]["passes"] = True
    tasks_path.write_text(json.dumps(pending), encoding="utf-8")
    synced = _run_cli(tmp_path, "sync-tasks")

    assert synced.returncode == 0, synced.stderr
    assert "Synced 1 completed item(s)" in synced.stdout
    assert [entry["passes"] for entry in json.loads(prd.read_text(encoding="utf-8"))] == [True, True]


def test_convert_dry_run_prints_yaml(tmp_path: Path) -> None:
    _seed_prd(tmp_path)

    completed = _run_cli(tmp_path, "convert", "--dry-run")

    assert completed.returncode == 0, completed.stderr
    assert "Would convert .ralph/prd.json to .ralph/prd.yaml:" in completed.stdout
    assert "- category: feature" in completed.stdout
    assert not (tmp_path / ".ralph" / "prd.yaml").exists()


def test_merge_prints_merged_prd(tmp_path: Path) -> None:
    _write(tmp_path / "baseline.json", json.dumps(_VALID_PRD))
    _write(
        tmp_path / "corrupted.json",
        json.dumps({"items": [{"title": "Add login page", "status": "done"}]}),
    )

    completed = _run_cli(tmp_path, "merge", "baseline.json", "corrupted.json")

    assert completed.returncode == 0, completed.stderr
    merged = json.loads(completed.stdout)
    assert [entry["passes"] for entry in merged] == [True, True]
    assert json.loads((tmp_path / "baseline.json").read_text(encoding="utf-8")) == _VALID_PRD


def test_ralph_dir_override(tmp_path: Path) -> None:
    _write(tmp_path / "agent" / "prd.json", json.dumps(_VALID_PRD))

    completed = _run_cli(tmp_path, "validate", "--ralph-dir", "agent")

    assert completed.returncode == 0, completed.stderr
    assert "2 entries found." in completed.stdout


def test_invalid_config_exits_with_config_error(tmp_path: Path) -> None:
    _write(tmp_path / "ralph.toml", "[paths]\nbogus = 1\n")

    completed = _run_cli(tmp_path, "validate")

    assert completed.returncode == 2
    assert "paths.bogus: unknown field" in completed.stderr


def test_config_reflects_ralph_dir_override(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "config", "--ralph-dir", "agent")

    assert completed.returncode == 0, completed.stderr
    effective = json.loads(completed.stdout)
    assert effective["paths"]["ralph_dir"].endswith("/agent")
    assert effective["repair"]["max_reported_errors"] == 5
