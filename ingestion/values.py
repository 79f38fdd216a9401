"""Cell-level helpers: kind classification and scalar parsing.

Numbers are recognised with the same shape rule the delimited decoder
uses for dynamic typing, so a value classified as a number here always
converts cleanly in the type converter.
"""

import math
import re
import warnings
from datetime import date, datetime
from numbers import Real
from typing import Any, Optional

import numpy as np
import pandas as pd

from .models import ValueKind

NUMBER_PATTERN = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
INTEGER_PATTERN = re.compile(r"^\s*-?\d+\s*$")
_DIGIT = re.compile(r"\d")


def parse_number_text(text: str) -> Optional[int | float]:
    """Parse numeric-looking text into an int or float.

    Returns None when the text does not look like a plain decimal number
    ("NaN", "inf", "1,000" and hex literals are all rejected).
    """
    if not NUMBER_PATTERN.match(text):
        return None
    if INTEGER_PATTERN.match(text):
        return int(text)
    return float(text)


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse a string or datetime-like value into a pandas Timestamp.

    Returns None when the value is not a recognisable date. Strings must
    contain at least one digit and must not be plain numbers; this keeps
    words like "now" and bare numbers out of date columns.
    """
    if isinstance(value, (datetime, date, np.datetime64)):
        ts = pd.Timestamp(value)
        return None if pd.isna(ts) else ts
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not _DIGIT.search(text) or NUMBER_PATTERN.match(text):
        return None

    try:
        with warnings.catch_warnings():
            # dayfirst/format inference hints are noise for scalar parsing
            warnings.simplefilter("ignore", UserWarning)
            ts = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts


def is_date_string(value: Any) -> bool:
    """True when ``value`` is a string the date parser accepts."""
    return isinstance(value, str) and parse_timestamp(value) is not None


def format_timestamp(ts: pd.Timestamp) -> str:
    """Format a timestamp as ISO 8601 UTC with millisecond precision.

    Naive timestamps are taken to be UTC already.
    """
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%dT%H:%M:%S") + f".{ts.microsecond // 1000:03d}Z"


def to_python_scalar(value: Any) -> Any:
    """Convert numpy/pandas scalars into plain Python values.

    NaN, NaT and pandas NA all become None.
    """
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, (np.bool_, bool)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        value = float(value)
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT or value is pd.NA:
        return None
    return value


def classify_value(value: Any) -> ValueKind:
    """Tag a single cell with its value kind.

    Booleans are strings, not numbers. NaN counts as null.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.STRING
    if isinstance(value, Real):
        if isinstance(value, float) and math.isnan(value):
            return ValueKind.NULL
        return ValueKind.NUMBER
    if isinstance(value, (datetime, date, np.datetime64)):
        return ValueKind.DATE
    if isinstance(value, str) and is_date_string(value):
        return ValueKind.DATE
    return ValueKind.STRING


def to_text(value: Any) -> str:
    """Render a cell as text: booleans lowercase, integral floats without ".0"."""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
