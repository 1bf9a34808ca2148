"""Stable constant tables shared across PRD validation, recovery, and merge."""

from __future__ import annotations

from typing import Final

# Closed category vocabulary for PRD entries.
CATEGORIES: Final[tuple[str, ...]] = (
    "ui",
    "feature",
    "bugfix",
    "setup",
    "development",
    "testing",
    "docs",
)

# Container keys a writer may nest the entry array under, in priority order.
WRAPPER_KEYS: Final[tuple[str, ...]] = (
    "features",
    "items",
    "entries",
    "prd",
    "tasks",
    "requirements",
)

# Field synonyms, scanned linearly; the first usable key wins.
CATEGORY_KEYS: Final[tuple[str, ...]] = ("category", "cat", "type", "id")
DESCRIPTION_KEYS: Final[tuple[str, ...]] = (
    "description",
    "desc",
    "name",
    "title",
    "task",
    "feature",
)
STEPS_KEYS: Final[tuple[str, ...]] = ("steps", "verification", "checks", "tasks")
PASSES_KEYS: Final[tuple[str, ...]] = (
    "passes",
    "pass",
    "passed",
    "done",
    "complete",
    "completed",
    "status",
    "finished",
)

TRUTHY_TOKENS: Final[frozenset[str]] = frozenset(
    {"true", "pass", "passed", "done", "complete", "completed", "finished"}
)
FALSY_TOKENS: Final[frozenset[str]] = frozenset(
    {"false", "fail", "failed", "pending", "incomplete"}
)

DEFAULT_RECOVERED_STEP: Final[str] = "Verify the feature works as expected"

# Similarity merge tuning.
SIMILARITY_THRESHOLD: Final[float] = 0.5
MIN_WORD_LENGTH: Final[int] = 3
WARNING_PREVIEW_CHARS: Final[int] = 50

# On-disk layout.
RALPH_DIR: Final[str] = ".ralph"
PRD_FILE: Final[str] = "prd.json"
PRD_YAML_FILE: Final[str] = "prd.yaml"
TASKS_FILE: Final[str] = "prd-tasks.json"
PRE_YAML_SUFFIX: Final[str] = ".pre-yaml"
BACKUP_PREFIX: Final[str] = "backup.prd."
BACKUP_EXTENSIONS: Final[tuple[str, ...]] = (".json", ".yaml", ".yml")
YAML_EXTENSIONS: Final[frozenset[str]] = frozenset({".yaml", ".yml"})

CONFIG_SCHEMA_VERSION: Final[int] = 1

__all__ = [
    "BACKUP_EXTENSIONS",
    "BACKUP_PREFIX",
    "CATEGORIES",
    "CATEGORY_KEYS",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_RECOVERED_STEP",
    "DESCRIPTION_KEYS",
    "FALSY_TOKENS",
    "MIN_WORD_LENGTH",
    "PASSES_KEYS",
    "PRD_FILE",
    "PRD_YAML_FILE",
    "PRE_YAML_SUFFIX",
    "RALPH_DIR",
    "SIMILARITY_THRESHOLD",
    "STEPS_KEYS",
    "TASKS_FILE",
    "TRUTHY_TOKENS",
    "WARNING_PREVIEW_CHARS",
    "WRAPPER_KEYS",
    "YAML_EXTENSIONS",
]
