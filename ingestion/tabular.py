"""Tabular decoder for delimited text and spreadsheets.

This module turns CSV text and Excel workbooks into lists of header-keyed
rows using pandas. It does not normalize keys or infer types; that is the
job of the normalizer, inferencer and converter downstream.
"""

import csv
import io
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from utils import get_logger

from .errors import IngestionError, InvalidFormatError
from .models import Row
from .values import parse_number_text, to_python_scalar

logger = get_logger(__name__)


@dataclass
class ParseIssue:
    """A single row-level problem found while decoding delimited text."""

    code: str
    message: str
    fields: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        issue: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.fields is not None:
            issue["fields"] = self.fields
        return issue


@dataclass
class DelimitedResult:
    """Rows decoded from delimited text plus every issue found on the way."""

    rows: list[Row] = field(default_factory=list)
    errors: list[ParseIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def dynamic_type(value: Any) -> Any:
    """Turn numeric-looking text into a number; leave everything else alone.

    Missing cells (NaN from pandas) become None.
    """
    value = to_python_scalar(value)
    if isinstance(value, str):
        number = parse_number_text(value)
        if number is not None:
            return number
    return value


def _header_names(values: list[Any]) -> list[str]:
    """Header cells as strings; repeated names get ".1", ".2" suffixes."""
    names: list[str] = []
    seen: dict[str, int] = {}
    for value in values:
        value = to_python_scalar(value)
        name = "" if value is None else str(value)
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def _quoting_issue(text: str, delimiter: str) -> Optional[ParseIssue]:
    """Check quoting with a strict csv reader.

    An unterminated quoted field makes the pandas python engine swallow
    the rest of the input without reporting anything.
    """
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    try:
        for _ in reader:
            pass
    except csv.Error as e:
        message = str(e)
        if "unexpected end of data" in message:
            code = "MissingQuotes"
        elif "expected after" in message:
            code = "InvalidQuotes"
        else:
            code = "ParserError"
        return ParseIssue(code=code, message=f"Line {reader.line_num}: {message}")
    return None


def decode_delimited(text: str, delimiter: str = ",") -> DelimitedResult:
    """Decode delimited text whose first line is a header.

    Blank lines are skipped. Rows with more fields than the header are not
    fatal here: each one is recorded as a ParseIssue and the decode carries
    on, so callers see every bad row at once. Rows with fewer fields than
    the header get None for the missing cells. Broken quoting (an
    unterminated or malformed quoted field) is reported as a single
    ParseIssue and no rows are returned.

    Args:
        text: Delimited text
        delimiter: Single-character field separator

    Returns:
        DelimitedResult with rows in source order and any parse issues
    """
    issues: list[ParseIssue] = []

    if not text.strip():
        logger.debug("Delimited input is empty")
        return DelimitedResult()

    quoting_issue = _quoting_issue(text, delimiter)
    if quoting_issue is not None:
        logger.debug(f"Delimited input has broken quoting: {quoting_issue.message}")
        return DelimitedResult(errors=[quoting_issue])

    def _record_bad_line(fields: list[str]) -> None:
        issues.append(
            ParseIssue(
                code="TooManyFields",
                message=f"Row has {len(fields)} fields, more than the header allows",
                fields=list(fields),
            )
        )
        return None

    # The header is read as an ordinary row so pandas never mistakes a
    # too-long first data row for an implicit index column.
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_record_bad_line,
        )
    except pd.errors.EmptyDataError:
        return DelimitedResult(errors=issues)
    except pd.errors.ParserError as e:
        issues.append(ParseIssue(code="ParserError", message=str(e)))
        return DelimitedResult(errors=issues)

    records = list(frame.itertuples(index=False, name=None))
    if not records:
        return DelimitedResult(errors=issues)

    columns = _header_names(list(records[0]))
    rows = [
        {column: dynamic_type(value) for column, value in zip(columns, record)}
        for record in records[1:]
    ]

    logger.info(f"Decoded delimited text: {len(rows)} rows, {len(columns)} columns")
    if issues:
        logger.debug(f"Delimited decode found {len(issues)} malformed rows")
    return DelimitedResult(rows=rows, errors=issues)


def _frame_to_rows(frame: pd.DataFrame) -> list[Row]:
    columns = [str(column) for column in frame.columns]
    return [
        {column: to_python_scalar(value) for column, value in zip(columns, record)}
        for record in frame.itertuples(index=False, name=None)
    ]


def decode_spreadsheet(content: bytes, extension: str = "xlsx") -> dict[str, list[Row]]:
    """Decode every sheet of a workbook into header-keyed rows.

    Each sheet is decoded independently, in workbook order. Missing cells
    become None, so every row of a sheet carries the same keys.

    Args:
        content: Raw workbook bytes
        extension: "xlsx" or "xls", selects the reader engine

    Returns:
        Mapping of sheet name to rows

    Raises:
        InvalidFormatError: If the workbook cannot be read
        IngestionError: If the reader library for the format is missing
    """
    engine = "xlrd" if extension == "xls" else "openpyxl"

    try:
        frames = pd.read_excel(io.BytesIO(content), sheet_name=None, engine=engine)
    except ImportError as e:
        raise IngestionError(
            f"Missing required library for .{extension} workbooks: {e}"
        ) from e
    except Exception as e:
        raise InvalidFormatError(f"Invalid spreadsheet format: {e}") from e

    sheets: dict[str, list[Row]] = {}
    for sheet_name, frame in frames.items():
        sheets[str(sheet_name)] = _frame_to_rows(frame)
        logger.debug(f"Sheet '{sheet_name}': {len(frame)} rows, {len(frame.columns)} columns")

    logger.info(f"Decoded workbook: {len(sheets)} sheets")
    return sheets
