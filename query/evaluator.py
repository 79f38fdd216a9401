"""Runtime filter and sort evaluation over array-shaped datasets.

Filtering and sorting only ever apply to a flat list of rows. Anything
else (sheet maps, nested trees, scalars) passes through untouched.

Comparison policy:
- equals coerces the filter value to the cell's own type before
  comparing, so a numeric cell matches "30" as well as 30.
- contains matches case-insensitively on the text form of the cell.
- greaterThan/lessThan compare numerically; anything that is not a
  number on either side never matches.
- null cells match only ``equals`` with a null value.
"""

import functools
import math
import unicodedata
from numbers import Real
from typing import Any, Optional

from ingestion.models import RowsDataset
from ingestion.values import parse_number_text, to_text
from utils import get_logger

from .schema import FilterOperator, FilterSpec, SortDirection, SortSpec

logger = get_logger(__name__)


def to_number(value: Any) -> float:
    """Coerce a value to float; NaN when it is not numeric."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, Real):
        return float(value)
    if isinstance(value, str):
        number = parse_number_text(value)
        return math.nan if number is None else float(number)
    return math.nan


def collation_key(text: str) -> tuple[str, str, str]:
    """Sort key approximating locale collation.

    Accents and case are ignored first; ties are broken by accents, then
    lowercase before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return base, text.casefold(), text.swapcase()


def _field_value(row: Any, field: str) -> Any:
    return row.get(field) if isinstance(row, dict) else None


def _equals(cell: Any, target: Any) -> bool:
    if cell is None or target is None:
        return cell is None and target is None
    if isinstance(cell, bool) or isinstance(target, bool):
        return to_text(cell) == to_text(target)
    if isinstance(cell, Real):
        number = to_number(target)
        return not math.isnan(number) and float(cell) == number
    if isinstance(cell, str):
        return cell == to_text(target)
    return cell == target


def matches(row: Any, spec: FilterSpec) -> bool:
    """True when ``row`` satisfies the filter."""
    cell = _field_value(row, spec.field)

    if spec.operator is FilterOperator.EQUALS:
        return _equals(cell, spec.value)
    if spec.operator is FilterOperator.CONTAINS:
        if cell is None or spec.value is None:
            return False
        return to_text(spec.value).lower() in to_text(cell).lower()
    if spec.operator is FilterOperator.GREATER_THAN:
        return to_number(cell) > to_number(spec.value)
    if spec.operator is FilterOperator.LESS_THAN:
        return to_number(cell) < to_number(spec.value)
    return True


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison used by the sort.

    Two strings compare by collation; anything else by numeric
    difference, with non-numeric operands treated as equal.
    """
    if isinstance(a, str) and isinstance(b, str):
        key_a, key_b = collation_key(a), collation_key(b)
        return (key_a > key_b) - (key_a < key_b)

    difference = to_number(a) - to_number(b)
    if math.isnan(difference) or difference == 0:
        return 0
    return 1 if difference > 0 else -1


def apply_filter(data: Any, spec: Optional[FilterSpec]) -> Any:
    """Keep the rows matching ``spec``; non-array data is returned as-is."""
    if spec is None:
        return data
    if isinstance(data, RowsDataset):
        return RowsDataset(rows=apply_filter(data.rows, spec))
    if not isinstance(data, list):
        logger.debug("Filter skipped: dataset is not an array")
        return data

    kept = [row for row in data if matches(row, spec)]
    logger.debug(
        f"Filter {spec.field} {spec.operator.value} {spec.value!r}: "
        f"{len(kept)} of {len(data)} rows kept"
    )
    return kept


def apply_sort(data: Any, spec: Optional[SortSpec]) -> Any:
    """Stable sort of the rows by ``spec``; non-array data is returned as-is."""
    if spec is None:
        return data
    if isinstance(data, RowsDataset):
        return RowsDataset(rows=apply_sort(data.rows, spec))
    if not isinstance(data, list):
        logger.debug("Sort skipped: dataset is not an array")
        return data

    modifier = 1 if spec.direction is SortDirection.ASC else -1

    def _compare_rows(left: Any, right: Any) -> int:
        return compare_values(_field_value(left, spec.field), _field_value(right, spec.field)) * modifier

    return sorted(data, key=functools.cmp_to_key(_compare_rows))


def apply_query(
    data: Any,
    filter_spec: Optional[FilterSpec] = None,
    sort_spec: Optional[SortSpec] = None,
) -> Any:
    """Filter, then sort. Both steps are optional and independent."""
    return apply_sort(apply_filter(data, filter_spec), sort_spec)
