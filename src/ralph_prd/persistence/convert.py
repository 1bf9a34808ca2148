"""One-way migration of ``prd.json`` to ``prd.yaml``.

The JSON original is kept as ``prd.json.pre-yaml`` so the conversion can be
undone by renaming it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ralph_prd.constants import PRD_FILE, PRD_YAML_FILE, PRE_YAML_SUFFIX
from ralph_prd.domain.models import PrdEntry
from ralph_prd.persistence.prd_io import read_prd_file, serialize_prd_yaml
from ralph_prd.utils.fs import PathLike, atomic_write
from ralph_prd.validation.validator import validate_prd

logger = logging.getLogger(__name__)


class ConversionError(ValueError):
    """Raised when a conversion precondition does not hold."""


@dataclass(frozen=True, slots=True)
class ConversionResult:
    json_path: Path
    yaml_path: Path
    preserved_path: Path
    entries: list[PrdEntry]
    rendered: str
    written: bool


def convert_prd_to_yaml(
    ralph_dir: PathLike,
    *,
    force: bool = False,
    dry_run: bool = False,
) -> ConversionResult:
    """Convert ``ralph_dir/prd.json`` into ``ralph_dir/prd.yaml``.

    Refuses to overwrite an existing YAML file or a previous ``.pre-yaml``
    copy unless ``force`` is set. With ``dry_run`` nothing is written.
    """

    base = Path(ralph_dir)
    json_path = base / PRD_FILE
    yaml_path = base / PRD_YAML_FILE
    preserved_path = base / f"{PRD_FILE}{PRE_YAML_SUFFIX}"

    if not json_path.exists():
        raise ConversionError(f"{json_path} not found")
    if yaml_path.exists() and not force:
        raise ConversionError(f"{yaml_path} already exists; use --force to overwrite it")
    if preserved_path.exists() and not force:
        raise ConversionError(
            f"{preserved_path} already exists from a previous conversion; "
            "use --force to overwrite it"
        )

    parsed = read_prd_file(json_path)
    if parsed is None:
        raise ConversionError(f"{json_path} could not be parsed; run 'fix' to repair it")
    validation = validate_prd(parsed.content)
    if validation.data is None:
        raise ConversionError(f"{json_path} is not a valid PRD; run 'fix' to repair it")

    rendered = serialize_prd_yaml(validation.data)
    if not dry_run:
        atomic_write(yaml_path, rendered)
        json_path.replace(preserved_path)
        logger.info("converted %s to %s", json_path, yaml_path)

    return ConversionResult(
        json_path=json_path,
        yaml_path=yaml_path,
        preserved_path=preserved_path,
        entries=validation.data,
        rendered=rendered,
        written=not dry_run,
    )


__all__ = ["ConversionError", "ConversionResult", "convert_prd_to_yaml"]
