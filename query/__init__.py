"""Runtime filtering and sorting of array-shaped datasets."""

from .evaluator import apply_filter, apply_query, apply_sort, compare_values, matches
from .schema import FilterOperator, FilterSpec, SortDirection, SortSpec
from .validator import QuerySpecError, parse_filter_spec, parse_sort_spec

__all__ = [
    "FilterOperator",
    "FilterSpec",
    "SortDirection",
    "SortSpec",
    "QuerySpecError",
    "parse_filter_spec",
    "parse_sort_spec",
    "apply_filter",
    "apply_sort",
    "apply_query",
    "compare_values",
    "matches",
]
