"""Filter and sort specification schemas using Pydantic.

Both specifications are stateless and supplied per request. Once
validated they are immutable.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FilterOperator(str, Enum):
    """Supported filter operators."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def _strip_field(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("field cannot be empty")
    return v.strip()


class FilterSpec(BaseModel):
    """Narrow an array of rows to those whose ``field`` satisfies ``operator``."""

    field: str = Field(..., min_length=1, description="Row key to test")
    operator: FilterOperator = Field(..., description="Comparison to apply")
    value: Any = Field(..., description="Value to compare against")

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        """Validate field name."""
        return _strip_field(v)

    model_config = ConfigDict(frozen=True, extra="forbid")


class SortSpec(BaseModel):
    """Order an array of rows by ``field``."""

    field: str = Field(..., min_length=1, description="Row key to sort by")
    direction: SortDirection = Field(
        default=SortDirection.ASC, description="Sort direction"
    )

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        """Validate field name."""
        return _strip_field(v)

    model_config = ConfigDict(frozen=True, extra="forbid")
