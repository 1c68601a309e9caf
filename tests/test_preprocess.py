from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from stream_panel.errors import InvalidValueError
from stream_panel.preprocess.dates import parse_date, parse_dates
from stream_panel.preprocess.values import coerce_value


@pytest.mark.parametrize("raw", ["1999", 1999, 1999.0, " 1999 "])
def test_parse_date_maps_bare_year_to_january_first(raw: object) -> None:
    assert parse_date(raw) == pd.Timestamp(1999, 1, 1)


def test_parse_date_handles_iso_compact_and_generic_strings() -> None:
    assert parse_date("2020-03-15") == pd.Timestamp(2020, 3, 15)
    assert parse_date("20200315") == pd.Timestamp(2020, 3, 15)
    assert parse_date(20200315) == pd.Timestamp(2020, 3, 15)
    assert parse_date("March 15, 2020") == pd.Timestamp(2020, 3, 15)


def test_parse_date_passes_through_date_objects_and_drops_timezone() -> None:
    assert parse_date(date(2021, 6, 1)) == pd.Timestamp(2021, 6, 1)
    assert parse_date(datetime(2021, 6, 1, 12, 30)) == pd.Timestamp(2021, 6, 1, 12, 30)
    aware = parse_date("2021-06-01T12:00:00+02:00")
    assert aware.tzinfo is None
    assert aware == pd.Timestamp(2021, 6, 1, 10, 0)


@pytest.mark.parametrize("raw", [None, "", "not a date", "2020-13-45", True, 12.5, object()])
def test_parse_date_returns_nat_for_unparseable_input(raw: object) -> None:
    assert pd.isna(parse_date(raw))


def test_parse_dates_keeps_index_and_dtype() -> None:
    parsed = parse_dates(pd.Series(["1880", "bad"], index=[5, 7]))
    assert list(parsed.index) == [5, 7]
    assert parsed.dtype == "datetime64[ns]"
    assert parsed.iloc[0] == pd.Timestamp(1880, 1, 1)
    assert pd.isna(parsed.iloc[1])


def test_coerce_value_parses_strings_and_numbers() -> None:
    assert coerce_value("12.5") == 12.5
    assert coerce_value(" 3 ") == 3.0
    assert coerce_value(7) == 7.0
    assert coerce_value(-2.5) == -2.5


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12%", 12.0), ("1,234", 1.0), ("3.5 people", 3.5), (".5", 0.5), ("-2e3x", -2000.0)],
)
def test_coerce_value_reads_leading_number(raw: str, expected: float) -> None:
    assert coerce_value(raw) == expected
    assert coerce_value(raw, policy="error") == expected


@pytest.mark.parametrize("raw", ["abc", "", "%12", None, float("nan"), ["1"]])
def test_coerce_value_zero_policy_masks_bad_metrics(raw: object) -> None:
    assert coerce_value(raw) == 0.0


def test_coerce_value_error_policy_raises() -> None:
    with pytest.raises(InvalidValueError, match="abc"):
        coerce_value("abc", policy="error")
    assert coerce_value("4", policy="error") == 4.0
