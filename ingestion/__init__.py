"""Multi-format data ingestion & normalization.

This package decodes CSV, Excel, JSON, XML, HTML and free text into a
normalized, typed dataset: key sanitization, type inference across rows,
and type conversion for tabular input.
"""

from .dispatcher import FormatDispatcher, build_default_decoders, file_extension, ingest, load_json
from .errors import (
    ConversionError,
    IngestionError,
    InputTooLargeError,
    InvalidFormatError,
    UnsupportedFormatError,
)
from .markup import decode_html, decode_xml
from .models import (
    ColumnType,
    DatasetKind,
    NormalizedDataset,
    Row,
    RowsDataset,
    SheetsDataset,
    TreeDataset,
    ValueKind,
    dataset_from_json,
)
from .normalizer import normalize_row, normalize_rows, sanitize_key
from .tabular import DelimitedResult, ParseIssue, decode_delimited, decode_spreadsheet
from .type_converter import convert_rows, convert_value, normalize_and_type
from .type_inferencer import (
    ColumnMetadata,
    SchemaMetadata,
    collect_value_kinds,
    infer_column_types,
    infer_schema,
)
from .values import classify_value

__all__ = [
    "FormatDispatcher",
    "build_default_decoders",
    "file_extension",
    "ingest",
    "load_json",
    "IngestionError",
    "UnsupportedFormatError",
    "InvalidFormatError",
    "ConversionError",
    "InputTooLargeError",
    "decode_xml",
    "decode_html",
    "decode_delimited",
    "decode_spreadsheet",
    "DelimitedResult",
    "ParseIssue",
    "sanitize_key",
    "normalize_row",
    "normalize_rows",
    "collect_value_kinds",
    "infer_schema",
    "infer_column_types",
    "ColumnMetadata",
    "SchemaMetadata",
    "convert_value",
    "convert_rows",
    "normalize_and_type",
    "classify_value",
    "ColumnType",
    "ValueKind",
    "DatasetKind",
    "NormalizedDataset",
    "Row",
    "RowsDataset",
    "SheetsDataset",
    "TreeDataset",
    "dataset_from_json",
]
