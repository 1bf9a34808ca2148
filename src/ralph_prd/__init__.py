"""
ralph-prd — PRD validation, recovery, and merge for autonomous agent loops.

Purpose
- Package root. Defines package-level metadata and the core API.

An agent edits the PRD (a JSON or YAML list of task entries) between
iterations and sometimes corrupts it: wrapping the list, renaming fields, or
writing status strings instead of booleans. This package validates the PRD,
salvages entries from malformed documents, and forwards completion claims
from a corrupted rewrite onto the last trusted copy.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from ralph_prd.domain.models import ExtractedItem, MergeResult, PrdEntry, ValidationResult
from ralph_prd.persistence import (
    create_backup,
    create_template_prd,
    find_latest_backup,
    read_prd_file,
    read_yaml_prd_file,
    write_prd,
)
from ralph_prd.prompting import expand_file_references, expand_prd_file_references
from ralph_prd.recovery import attempt_recovery, extract_items, smart_merge
from ralph_prd.validation import validate_prd

__version__ = "0.1.0"

__all__ = [
    "ExtractedItem",
    "MergeResult",
    "PrdEntry",
    "ValidationResult",
    "__version__",
    "attempt_recovery",
    "create_backup",
    "create_template_prd",
    "expand_file_references",
    "expand_prd_file_references",
    "extract_items",
    "find_latest_backup",
    "read_prd_file",
    "read_yaml_prd_file",
    "smart_merge",
    "validate_prd",
    "write_prd",
]
