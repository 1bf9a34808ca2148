from __future__ import annotations

import os
from pathlib import Path

import pytest

from ralph_prd.utils import atomic_write, lower_suffix


@pytest.mark.unit
def test_atomic_write_replaces_content_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "prd.json"
    target.write_text("old", encoding="utf-8")

    atomic_write(target, "[]\n")
    atomic_write(target, b"[1]")

    assert target.read_bytes() == b"[1]"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["prd.json"]


@pytest.mark.unit
def test_atomic_write_requires_existing_parent(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        atomic_write(tmp_path / "missing" / "prd.json", "[]")


@pytest.mark.unit
def test_atomic_write_cleans_up_when_replace_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "prd.json"
    target.write_text("keep", encoding="utf-8")

    def _fail_replace(src: object, dst: object) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", _fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write(target, "new")

    assert target.read_text(encoding="utf-8") == "keep"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["prd.json"]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [("prd.JSON", ".json"), ("backup.prd.2024.Yml", ".yml"), ("README", "")],
)
def test_lower_suffix(name: str, expected: str) -> None:
    assert lower_suffix(name) == expected
