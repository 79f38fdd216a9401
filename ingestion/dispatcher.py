"""Format dispatcher for the ingestion pipeline.

This module routes raw content to exactly one decoder based on the file
extension and assembles the normalized dataset. Decoders are looked up
in an explicit mapping that the caller builds once and passes in.
"""

import json
from pathlib import PurePath
from typing import Any, Callable, Optional

from utils import get_logger

from .errors import InvalidFormatError, UnsupportedFormatError
from .markup import decode_html, decode_xml, text_lines
from .models import (
    NormalizedDataset,
    RowsDataset,
    SheetsDataset,
    TreeDataset,
    dataset_from_json,
)
from .tabular import decode_delimited, decode_spreadsheet
from .type_converter import normalize_and_type

logger = get_logger(__name__)

Decoder = Callable[[bytes, str], NormalizedDataset]


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not a valid JSON value")


def load_json(text: str) -> Any:
    """Parse strict JSON text.

    Unlike plain ``json.loads``, the non-standard NaN, Infinity and
    -Infinity literals are rejected.

    Raises:
        ValueError: If the text is not valid JSON
    """
    return json.loads(text, parse_constant=_reject_constant)


def _decode_json(content: bytes, encoding: str) -> NormalizedDataset:
    text = decode_text(content, encoding)
    try:
        value = load_json(text)
    except ValueError as e:
        raise InvalidFormatError(f"Invalid JSON format: {e}") from e
    return dataset_from_json(value)


def _decode_xml(content: bytes, encoding: str) -> NormalizedDataset:
    return TreeDataset(value=decode_xml(decode_text(content, encoding)))


def _decode_html(content: bytes, encoding: str) -> NormalizedDataset:
    return TreeDataset(value=decode_html(decode_text(content, encoding)))


def _make_csv_decoder(delimiter: str) -> Decoder:
    def _decode_csv(content: bytes, encoding: str) -> NormalizedDataset:
        result = decode_delimited(decode_text(content, encoding), delimiter=delimiter)
        if not result.ok:
            raise InvalidFormatError(
                "CSV parsing errors",
                details=[issue.to_dict() for issue in result.errors],
            )
        return RowsDataset(rows=normalize_and_type(result.rows))

    return _decode_csv


def _make_spreadsheet_decoder(extension: str) -> Decoder:
    def _decode_spreadsheet(content: bytes, encoding: str) -> NormalizedDataset:
        sheets = {
            name: normalize_and_type(rows, sheet=name)
            for name, rows in decode_spreadsheet(content, extension=extension).items()
        }
        if len(sheets) == 1:
            return RowsDataset(rows=next(iter(sheets.values())))
        return SheetsDataset(sheets=sheets)

    return _decode_spreadsheet


def _decode_text_file(content: bytes, encoding: str) -> NormalizedDataset:
    """Try JSON, then XML, then fall back to the raw lines."""
    text = decode_text(content, encoding).strip()
    try:
        return dataset_from_json(load_json(text))
    except ValueError:
        logger.debug("Text content is not JSON, trying XML")
    try:
        return TreeDataset(value=decode_xml(text))
    except InvalidFormatError:
        logger.debug("Text content is not XML, keeping raw lines")
    return TreeDataset(value=text_lines(text))


def decode_text(content: bytes | str, encoding: str = "utf-8") -> str:
    """Decode raw bytes to text, tolerating a UTF-8 byte order mark.

    Raises:
        InvalidFormatError: If the bytes are not valid in ``encoding``
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    if encoding.lower().replace("-", "") == "utf8":
        encoding = "utf-8-sig"
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as e:
        raise InvalidFormatError(f"Content is not valid {encoding} text: {e}") from e
    except LookupError as e:
        raise InvalidFormatError(f"Unknown text encoding: {encoding}") from e


def file_extension(file_name: str) -> str:
    """Lowercase extension of a file name without the dot ("" if none).

    Unlike Path.suffix, a bare ".json" counts as having an extension.
    """
    name = PurePath(file_name).name
    return name.rsplit(".", 1)[1].lower() if "." in name else ""


def build_default_decoders(csv_delimiter: str = ",") -> dict[str, Decoder]:
    """Build the extension to decoder mapping.

    Keys are lowercase extensions without the dot.
    """
    return {
        "json": _decode_json,
        "xml": _decode_xml,
        "html": _decode_html,
        "htm": _decode_html,
        "csv": _make_csv_decoder(csv_delimiter),
        "xlsx": _make_spreadsheet_decoder("xlsx"),
        "xls": _make_spreadsheet_decoder("xls"),
        "txt": _decode_text_file,
    }


class FormatDispatcher:
    """Routes one input to its decoder and returns a normalized dataset.

    The dispatcher is stateless across calls; every call builds fresh
    structures.

    Args:
        decoders: Extension to decoder mapping (defaults to
            ``build_default_decoders()``)
        encoding: Text encoding for text-based formats
    """

    def __init__(
        self,
        decoders: Optional[dict[str, Decoder]] = None,
        encoding: str = "utf-8",
    ):
        self.decoders = decoders if decoders is not None else build_default_decoders()
        self.encoding = encoding

    def supported_extensions(self) -> list[str]:
        return sorted(self.decoders)

    def dispatch(self, file_name: str, content: bytes | str) -> NormalizedDataset:
        """Decode ``content`` according to the extension of ``file_name``.

        Args:
            file_name: Original file name; only its extension matters
            content: Raw file content

        Returns:
            RowsDataset, SheetsDataset or TreeDataset

        Raises:
            UnsupportedFormatError: If no decoder handles the extension
            InvalidFormatError: If the content does not parse as its format
        """
        extension = file_extension(file_name)
        decoder = self.decoders.get(extension)
        if decoder is None:
            raise UnsupportedFormatError(file_name, extension)

        if isinstance(content, str):
            content = content.encode(self.encoding)

        logger.info(f"Decoding '{file_name}' as .{extension} ({len(content)} bytes)")
        dataset = decoder(content, self.encoding)
        logger.info(f"Decoded '{file_name}' into a {dataset.kind.value} dataset")
        return dataset


def ingest(
    file_name: str,
    content: bytes | str,
    dispatcher: Optional[FormatDispatcher] = None,
) -> NormalizedDataset:
    """Decode one input into a normalized dataset.

    Convenience wrapper around ``FormatDispatcher.dispatch``.
    """
    dispatcher = dispatcher or FormatDispatcher()
    return dispatcher.dispatch(file_name, content)
