"""Query specification validator.

Filter and sort specifications arrive as JSON text (for example from a
query string) or as already-decoded dictionaries. This module validates
them against the Pydantic schemas and produces user-friendly errors.
"""

import json
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from query.schema import FilterSpec, SortSpec

SpecT = TypeVar("SpecT", bound=BaseModel)


class QuerySpecError(Exception):
    """Raised when a filter or sort specification is invalid."""

    pass


def _load_raw(raw: Any, label: str) -> Any:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise QuerySpecError(f"Invalid JSON syntax in {label} specification: {e}") from e
    if not isinstance(raw, dict):
        raise QuerySpecError(
            f"{label.capitalize()} specification must be an object, got {type(raw).__name__}"
        )
    return raw


def _format_validation_error(error: ValidationError) -> str:
    """Format Pydantic validation errors, one field per line."""
    errors = []
    for err in error.errors():
        field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
        error_msg = err.get("msg", "Validation error")
        error_type = err.get("type", "unknown")
        errors.append(f"  {field_path}: {error_msg} ({error_type})")
    return "\n".join(errors)


def _parse_spec(raw: Any, model: type[SpecT], label: str) -> Optional[SpecT]:
    if raw is None:
        return None
    if isinstance(raw, model):
        return raw
    data = _load_raw(raw, label)
    try:
        return model(**data)
    except ValidationError as e:
        raise QuerySpecError(
            f"{label.capitalize()} specification is invalid:\n{_format_validation_error(e)}"
        ) from e


def parse_filter_spec(raw: Any) -> Optional[FilterSpec]:
    """Validate a filter specification.

    Args:
        raw: JSON text, a dict, an existing FilterSpec, or None

    Returns:
        FilterSpec, or None when ``raw`` is None

    Raises:
        QuerySpecError: If the specification is malformed
    """
    return _parse_spec(raw, FilterSpec, "filter")


def parse_sort_spec(raw: Any) -> Optional[SortSpec]:
    """Validate a sort specification.

    Args:
        raw: JSON text, a dict, an existing SortSpec, or None

    Returns:
        SortSpec, or None when ``raw`` is None

    Raises:
        QuerySpecError: If the specification is malformed
    """
    return _parse_spec(raw, SortSpec, "sort")
