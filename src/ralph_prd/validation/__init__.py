"""Schema validation for PRD documents."""

from ralph_prd.validation.validator import NOT_AN_ARRAY_ERROR, validate_prd

__all__ = ["NOT_AN_ARRAY_ERROR", "validate_prd"]
