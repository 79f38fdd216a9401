"""Type inference for normalized rows.

This module inspects every key seen across all rows and assigns one
column type per key. Rows may carry different key subsets; a key missing
from a row simply contributes nothing for that row.
"""

from dataclasses import dataclass, field
from typing import Iterable

from utils import get_logger

from .models import ColumnType, Row, ValueKind
from .values import classify_value

logger = get_logger(__name__)


@dataclass
class ColumnMetadata:
    """Inference result for a single column.

    All fields are machine-readable and deterministic.
    """

    name: str
    column_type: ColumnType
    kinds: set[ValueKind] = field(default_factory=set)
    null_count: int = 0
    value_count: int = 0


@dataclass
class SchemaMetadata:
    """Inference result for a whole row set, keyed by column name.

    Column order follows first appearance across the rows.
    """

    columns: dict[str, ColumnMetadata]
    total_rows: int

    @property
    def column_types(self) -> dict[str, ColumnType]:
        return {name: meta.column_type for name, meta in self.columns.items()}


def decide_column_type(kinds: set[ValueKind]) -> ColumnType:
    """Pick a column type from the set of observed value kinds.

    Decision rule, first match wins:
    1. only numbers (optionally with nulls) -> number
    2. only dates (optionally with nulls) -> date
    3. anything else, including all-null and any mix -> string
    """
    non_null = kinds - {ValueKind.NULL}
    if non_null == {ValueKind.NUMBER}:
        return ColumnType.NUMBER
    if non_null == {ValueKind.DATE}:
        return ColumnType.DATE
    return ColumnType.STRING


def collect_value_kinds(rows: Iterable[Row]) -> dict[str, set[ValueKind]]:
    """Collect the kinds of value seen under each key."""
    kinds: dict[str, set[ValueKind]] = {}
    for row in rows:
        for key, value in row.items():
            kinds.setdefault(key, set()).add(classify_value(value))
    return kinds


def infer_schema(rows: list[Row]) -> SchemaMetadata:
    """Infer column metadata for a list of normalized rows.

    Args:
        rows: Normalized rows (sanitized keys, None for empty)

    Returns:
        SchemaMetadata with one entry per distinct key
    """
    columns: dict[str, ColumnMetadata] = {}
    for row in rows:
        for key, value in row.items():
            meta = columns.get(key)
            if meta is None:
                meta = ColumnMetadata(name=key, column_type=ColumnType.STRING)
                columns[key] = meta
            kind = classify_value(value)
            meta.kinds.add(kind)
            meta.value_count += 1
            if kind is ValueKind.NULL:
                meta.null_count += 1

    for meta in columns.values():
        meta.column_type = decide_column_type(meta.kinds)
        logger.debug(
            f"Column '{meta.name}': type={meta.column_type.value}, "
            f"kinds={sorted(k.value for k in meta.kinds)}, nulls={meta.null_count}"
        )

    schema = SchemaMetadata(columns=columns, total_rows=len(rows))
    logger.info(f"Type inference complete: {schema.total_rows} rows, {len(columns)} columns")
    return schema


def infer_column_types(rows: list[Row]) -> dict[str, ColumnType]:
    """Infer the single column type of every key seen across ``rows``."""
    return infer_schema(rows).column_types
