"""
ralph-prd — unit tests for config loader

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ralph_prd.config import ConfigValidationError
from ralph_prd.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    load_config,
)


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.mark.unit
def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    default_path = tmp_path / "default.toml"
    _write_config(default_path, "")
    _write_config(
        config_path,
        """
[repair]
max_reported_errors = 8
""".strip(),
    )

    default_loaded = load_config(default_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"RALPH_REPAIR_MAX_REPORTED_ERRORS": "9"})
    cli_loaded = load_config(
        config_path,
        environ={"RALPH_REPAIR_MAX_REPORTED_ERRORS": "9"},
        cli_overrides={"repair.max_reported_errors": 10},
    )

    assert default_loaded["repair"]["max_reported_errors"] == 5
    assert file_loaded["repair"]["max_reported_errors"] == 8
    assert env_loaded["repair"]["max_reported_errors"] == 9
    assert cli_loaded["repair"]["max_reported_errors"] == 10


@pytest.mark.unit
def test_env_mapping_coerces_types(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "RALPH_PATHS_PRD_FILE": "prd.yaml",
            "RALPH_OBSERVABILITY_LOG_TO_FILE": "yes",
            "RALPH_OBSERVABILITY_LOG_LEVEL": "debug",
            "RALPH_UNRELATED": "ignored",
        },
    )

    assert loaded["paths"]["prd_file"] == "prd.yaml"
    assert loaded["observability"]["log_to_file"] is True
    assert loaded["observability"]["log_level"] == "DEBUG"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("RALPH_REPAIR_MAX_REPORTED_ERRORS", "many", "must be an integer"),
        ("RALPH_OBSERVABILITY_LOG_TO_FILE", "maybe", "must be a boolean"),
    ],
)
def test_env_coercion_errors(tmp_path: Path, name: str, value: str, message: str) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match=message):
        load_config(config_path, environ={name: value})


@pytest.mark.unit
def test_relative_paths_are_normalized_against_config_dir(tmp_path: Path) -> None:
    config_path = tmp_path / "project" / "ralph.toml"
    _write_config(
        config_path,
        """
[paths]
ralph_dir = "state/../agent"

[observability]
log_dir = "/var/log/ralph"
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    assert loaded["paths"]["ralph_dir"] == (tmp_path / "project" / "agent").resolve().as_posix()
    assert loaded["observability"]["log_dir"] == "/var/log/ralph"
    assert loaded["paths"]["prd_file"] == "prd.json"


@pytest.mark.unit
def test_missing_default_file_is_optional(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["paths"]["ralph_dir"] == (tmp_path / ".ralph").resolve().as_posix()
    assert loaded["paths"]["tasks_file"] == "prd-tasks.json"


@pytest.mark.unit
def test_explicit_missing_file_fails(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


@pytest.mark.unit
def test_invalid_toml_fails(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "[paths\nralph_dir = 1")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.unit
def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "[paths]\nprd = 'x.json'\n")

    with pytest.raises(ConfigValidationError, match=r"paths\.prd: unknown field"):
        load_config(config_path, environ={})


@pytest.mark.unit
def test_none_cli_overrides_are_ignored(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "")

    loaded = load_config(config_path, environ={}, cli_overrides={"paths.ralph_dir": None})

    assert loaded["paths"]["ralph_dir"] == (tmp_path / ".ralph").resolve().as_posix()


@pytest.mark.unit
def test_dump_is_deterministic(tmp_path: Path) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "")

    first = dump_effective_config(load_config(config_path, environ={}))
    second = dump_effective_config(load_config(config_path, environ={}))

    assert first == second
    assert json.loads(first)["meta"]["schema_version"] == 1


@pytest.mark.unit
@pytest.mark.parametrize("key", ["paths", "paths.ralph_dir.extra", ".ralph_dir"])
def test_malformed_cli_override_keys_fail(tmp_path: Path, key: str) -> None:
    config_path = tmp_path / "ralph.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="invalid CLI override key"):
        load_config(config_path, environ={}, cli_overrides={key: "x"})
