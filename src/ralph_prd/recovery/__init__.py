"""Salvage paths for corrupted PRD documents: extraction, recovery, and merge."""

from ralph_prd.recovery.engine import attempt_recovery
from ralph_prd.recovery.extractor import extract_item, extract_items
from ralph_prd.recovery.merge import find_best_match, similarity, smart_merge

__all__ = [
    "attempt_recovery",
    "extract_item",
    "extract_items",
    "find_best_match",
    "similarity",
    "smart_merge",
]
