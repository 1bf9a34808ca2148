"""Files prepared for the agent: reference expansion and the filtered task list."""

from ralph_prd.prompting.references import (
    FILE_REFERENCE_RE,
    expand_file_references,
    expand_prd_file_references,
    resolve_reference,
)
from ralph_prd.prompting.tasks import (
    FilteredPrd,
    TaskFileError,
    create_filtered_prd,
    load_valid_prd,
    sync_passes_from_tasks,
)

__all__ = [
    "FILE_REFERENCE_RE",
    "FilteredPrd",
    "TaskFileError",
    "create_filtered_prd",
    "expand_file_references",
    "expand_prd_file_references",
    "load_valid_prd",
    "resolve_reference",
    "sync_passes_from_tasks",
]
