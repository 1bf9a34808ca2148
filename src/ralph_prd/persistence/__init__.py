"""On-disk PRD documents: format-aware I/O, backups, and bootstrap templates."""

from ralph_prd.persistence.backups import (
    backup_path_for,
    backup_timestamp,
    create_backup,
    find_latest_backup,
    list_backups,
)
from ralph_prd.persistence.convert import ConversionError, ConversionResult, convert_prd_to_yaml
from ralph_prd.persistence.prd_io import (
    ParsedPrd,
    is_yaml_path,
    read_prd_file,
    read_yaml_prd_file,
    serialize_prd,
    serialize_prd_yaml,
    write_prd,
    write_prd_auto,
    write_prd_yaml,
)
from ralph_prd.persistence.templates import (
    DEFAULT_PRD_LOCATION,
    FIELD_CONTRACT,
    create_template_prd,
)

__all__ = [
    "ConversionError",
    "ConversionResult",
    "DEFAULT_PRD_LOCATION",
    "FIELD_CONTRACT",
    "ParsedPrd",
    "backup_path_for",
    "backup_timestamp",
    "create_backup",
    "convert_prd_to_yaml",
    "create_template_prd",
    "find_latest_backup",
    "is_yaml_path",
    "list_backups",
    "read_prd_file",
    "read_yaml_prd_file",
    "serialize_prd",
    "serialize_prd_yaml",
    "write_prd",
    "write_prd_auto",
    "write_prd_yaml",
]
