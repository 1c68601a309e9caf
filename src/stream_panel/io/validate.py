from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from stream_panel.errors import EmptyDataError, InvalidDateError, MissingFieldsError
from stream_panel.io.schema import CanonicalColumns, missing_required_fields
from stream_panel.preprocess.dates import parse_dates

CANONICAL_ORDER = [
    CanonicalColumns.date,
    CanonicalColumns.category,
    CanonicalColumns.value,
    CanonicalColumns.other,
]


def validate_stream_records(records: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Check canonical records and return them as a frame in input order.

    The first record decides which fields are present, matching how the host
    delivers one schema per table. Any unparseable date fails the whole pass.
    """
    if not records:
        raise EmptyDataError()

    sample = records[0]
    missing = missing_required_fields(sample)
    if missing:
        raise MissingFieldsError(missing=missing, available=list(sample.keys()))

    frame = pd.DataFrame.from_records(list(records))
    columns = [column for column in CANONICAL_ORDER if column in frame.columns]
    frame = frame[columns].reset_index(drop=True)

    frame[CanonicalColumns.date] = parse_dates(frame[CanonicalColumns.date])
    invalid = int(frame[CanonicalColumns.date].isna().sum())
    if invalid:
        raise InvalidDateError(invalid_rows=invalid)

    frame[CanonicalColumns.value] = pd.to_numeric(
        frame[CanonicalColumns.value], errors="coerce"
    ).fillna(0.0)
    frame[CanonicalColumns.category] = frame[CanonicalColumns.category].astype(str)
    return frame
