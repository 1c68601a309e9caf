from __future__ import annotations

import numbers
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

YEAR_PATTERN = re.compile(r"^\d{4}$")
# Host platform date dimensions arrive as YYYYMMDD strings.
COMPACT_DATE_PATTERN = re.compile(r"^\d{8}$")


def _naive(timestamp: pd.Timestamp) -> pd.Timestamp:
    if pd.isna(timestamp) or timestamp.tzinfo is None:
        return timestamp
    return timestamp.tz_convert("UTC").tz_localize(None)


def parse_date(raw_value: Any) -> pd.Timestamp:
    """Parse a raw date cell into a timestamp, or ``NaT`` when it does not parse.

    Bare four-digit years map to January 1 of that year, hyphenated strings are
    read as ISO dates, and anything else goes through the generic parser.
    """
    if raw_value is None or isinstance(raw_value, bool):
        return pd.NaT
    if isinstance(raw_value, (datetime, date)):
        return _naive(pd.Timestamp(raw_value))
    if isinstance(raw_value, numbers.Real):
        if not float(raw_value).is_integer():
            return pd.NaT
        text = str(int(raw_value))
        if YEAR_PATTERN.match(text):
            return pd.Timestamp(year=int(text), month=1, day=1)
        if COMPACT_DATE_PATTERN.match(text):
            return pd.to_datetime(text, format="%Y%m%d", errors="coerce")
        return pd.NaT
    if not isinstance(raw_value, str):
        return pd.NaT

    text = raw_value.strip()
    if YEAR_PATTERN.match(text):
        return pd.Timestamp(year=int(text), month=1, day=1)
    if COMPACT_DATE_PATTERN.match(text):
        return pd.to_datetime(text, format="%Y%m%d", errors="coerce")
    if "-" in text:
        return _naive(pd.to_datetime(text, format="ISO8601", errors="coerce"))
    return _naive(pd.to_datetime(text, errors="coerce"))


def parse_dates(values: pd.Series) -> pd.Series:
    return pd.Series(
        [parse_date(value) for value in values],
        index=values.index,
        dtype="datetime64[ns]",
    )
