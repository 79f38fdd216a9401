"""Type conversion for normalized rows.

This module coerces every cell to its column's inferred type. Coercion is
best-effort: a cell that cannot be converted becomes None and a warning is
logged, so one bad cell never costs the rest of the dataset.
"""

import math
from numbers import Integral, Real
from typing import Any, Optional

from utils import get_logger

from .errors import ConversionError
from .models import ColumnType, Row
from .normalizer import normalize_rows
from .type_inferencer import infer_schema
from .values import format_timestamp, parse_number_text, parse_timestamp, to_text

logger = get_logger(__name__)


def _to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        raise ConversionError(value, ColumnType.NUMBER.value, "booleans are not numbers")
    if isinstance(value, Real):
        number = int(value) if isinstance(value, Integral) else float(value)
    elif isinstance(value, str):
        parsed = parse_number_text(value)
        if parsed is None:
            raise ConversionError(value, ColumnType.NUMBER.value, "not a decimal number")
        number = parsed
    else:
        raise ConversionError(value, ColumnType.NUMBER.value, f"unsupported type {type(value).__name__}")

    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            raise ConversionError(value, ColumnType.NUMBER.value, "not a finite number")
        if number.is_integer():
            return int(number)
    return number


def _to_date(value: Any) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        raise ConversionError(value, ColumnType.DATE.value, "not a recognisable date")
    return format_timestamp(ts)


def convert_value(value: Any, column_type: ColumnType) -> Any:
    """Coerce one value to ``column_type``.

    None always stays None.

    Raises:
        ConversionError: If the value cannot be coerced
    """
    if value is None:
        return None
    if column_type is ColumnType.NUMBER:
        return _to_number(value)
    if column_type is ColumnType.DATE:
        return _to_date(value)
    return to_text(value)


def convert_rows(rows: list[Row], types: dict[str, ColumnType]) -> list[Row]:
    """Apply inferred column types to every row.

    Keys absent from ``types`` are treated as string columns.

    Args:
        rows: Normalized rows
        types: Column type per key, as produced by the type inferencer

    Returns:
        New list of converted rows; the input is not modified
    """
    converted_rows: list[Row] = []
    failures = 0
    for index, row in enumerate(rows):
        converted: Row = {}
        for key, value in row.items():
            column_type = types.get(key, ColumnType.STRING)
            try:
                converted[key] = convert_value(value, column_type)
            except ConversionError as e:
                failures += 1
                logger.warning(f"Row {index}, column '{key}': {e.message}; using null")
                converted[key] = None
        converted_rows.append(converted)

    if failures:
        logger.warning(f"{failures} cells could not be converted and were set to null")
    return converted_rows


def normalize_and_type(rows: list[Row], sheet: Optional[str] = None) -> list[Row]:
    """Run the normalizer, inferencer and converter over decoded rows."""
    normalized = normalize_rows(rows)
    schema = infer_schema(normalized)
    label = f"sheet '{sheet}'" if sheet is not None else "rows"
    logger.info(
        f"Converting {label}: "
        + ", ".join(f"{name}={meta.column_type.value}" for name, meta in schema.columns.items())
    )
    return convert_rows(normalized, schema.column_types)
