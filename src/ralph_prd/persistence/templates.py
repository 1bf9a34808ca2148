"""Bootstrap PRD documents installed when automated repair has failed."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from ralph_prd.domain.models import Category, PrdEntry
from ralph_prd.utils.fs import PathLike

DEFAULT_PRD_LOCATION: Final[str] = ".ralph/prd.json"
FIELD_CONTRACT: Final[str] = (
    "category (string), description (string), steps (array of strings), passes (boolean)"
)


def create_template_prd(
    backup_path: PathLike | None = None,
    *,
    prd_location: str = DEFAULT_PRD_LOCATION,
) -> list[PrdEntry]:
    """Single ``setup`` entry handing the repair back to the agent.

    With a backup, the step embeds the backup content through an ``@{...}``
    marker against the backup's absolute path.
    """

    if backup_path is not None:
        absolute = Path(backup_path)
        if not absolute.is_absolute():
            absolute = Path.cwd() / absolute
        return [
            PrdEntry(
                category=Category.SETUP.value,
                description="Fix the PRD entries",
                steps=[
                    "Recreate PRD entries based on this corrupted backup content:\n\n"
                    f"@{{{absolute}}}",
                    f"Write valid entries to {prd_location} with format: {FIELD_CONTRACT}",
                ],
                passes=False,
            )
        ]

    return [
        PrdEntry(
            category=Category.SETUP.value,
            description="Add PRD entries",
            steps=[
                f"Add requirements by editing {prd_location} directly",
                f"Verify format: {FIELD_CONTRACT}",
            ],
            passes=False,
        )
    ]


__all__ = ["DEFAULT_PRD_LOCATION", "FIELD_CONTRACT", "create_template_prd"]
