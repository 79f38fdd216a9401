"""Row normalizer for decoded tabular data.

This module sanitizes field keys and collapses empty values to None.
Rows are normalized independently; key sets are reconciled later by the
type inferencer, which tolerates rows with different keys.
"""

import re
from typing import Any, Iterable

from utils import get_logger

from .models import Row

logger = get_logger(__name__)

_KEY_DISALLOWED = re.compile(r"[^A-Za-z0-9_]")


def sanitize_key(key: Any) -> str:
    """Strip every character outside [A-Za-z0-9_] and lowercase the rest.

    Keys differing only by punctuation or case collapse to the same result:

    >>> sanitize_key("First Name")
    'firstname'
    >>> sanitize_key("first-name!")
    'firstname'
    """
    return _KEY_DISALLOWED.sub("", str(key)).lower()


def normalize_row(row: Row) -> Row:
    """Normalize one row: sanitized keys, empty strings become None.

    When two keys sanitize to the same name, the later one wins.
    """
    normalized: Row = {}
    for key, value in row.items():
        clean_key = sanitize_key(key)
        if clean_key in normalized:
            logger.debug(f"Key '{key}' collapses onto existing key '{clean_key}'")
        normalized[clean_key] = None if isinstance(value, str) and value == "" else value
    return normalized


def normalize_rows(rows: Iterable[Row]) -> list[Row]:
    """Normalize every row, preserving order."""
    normalized = [normalize_row(row) for row in rows]
    logger.debug(f"Normalized {len(normalized)} rows")
    return normalized
