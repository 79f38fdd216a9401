"""Data model for the ingestion pipeline.

Cells are plain JSON-compatible scalars (or datetimes straight out of a
spreadsheet). Their kind is never guessed ad hoc: ``classify_value`` in
``ingestion.values`` is the single place a cell gets tagged with a
``ValueKind``. The pipeline output is one of three explicit dataset shapes,
so consumers must dispatch on ``kind`` instead of assuming a list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

Row = dict[str, Any]


class ValueKind(str, Enum):
    """Kind of a single cell value, as seen by the type inferencer."""

    NULL = "null"
    NUMBER = "number"
    DATE = "date"
    STRING = "string"


class ColumnType(str, Enum):
    """Single inferred type applied to every value under one key."""

    NUMBER = "number"
    DATE = "date"
    STRING = "string"


class DatasetKind(str, Enum):
    """Shape tag of a normalized dataset."""

    ROWS = "rows"
    SHEETS = "sheets"
    TREE = "tree"


@dataclass
class RowsDataset:
    """Flat array of type-converted rows (CSV, single-sheet workbooks)."""

    rows: list[Row] = field(default_factory=list)
    kind: ClassVar[DatasetKind] = DatasetKind.ROWS

    def to_json(self) -> list[Row]:
        return self.rows


@dataclass
class SheetsDataset:
    """Sheet name to rows mapping for multi-sheet workbooks.

    Sheet order follows the workbook.
    """

    sheets: dict[str, list[Row]] = field(default_factory=dict)
    kind: ClassVar[DatasetKind] = DatasetKind.SHEETS

    def to_json(self) -> dict[str, list[Row]]:
        return self.sheets


@dataclass
class TreeDataset:
    """Arbitrary nested value (XML, HTML extractions, plain text, JSON)."""

    value: Any = None
    kind: ClassVar[DatasetKind] = DatasetKind.TREE

    def to_json(self) -> Any:
        return self.value


NormalizedDataset = Union[RowsDataset, SheetsDataset, TreeDataset]


def dataset_from_json(value: Any) -> NormalizedDataset:
    """Wrap an already-parsed JSON value in the matching dataset shape.

    A list made only of objects is treated as rows; anything else is a tree.
    An empty list counts as rows.
    """
    if isinstance(value, list) and all(isinstance(item, dict) for item in value):
        return RowsDataset(rows=value)
    return TreeDataset(value=value)
