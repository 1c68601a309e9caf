from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from stream_panel.errors import DataSourceExhaustedError, StreamPanelError

logger = logging.getLogger(__name__)


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        return pd.read_csv(path, encoding="utf-8-sig")
    raise ValueError(f"Unsupported table file type: {path.suffix}")


def load_tabular(path: Path) -> list[dict[str, Any]]:
    """Load one candidate file as flat rows; reject tables with one column or no rows."""
    frame = load_table(path)
    if frame.empty or len(frame.columns) <= 1:
        raise ValueError(f"Invalid CSV format: {path}")
    # Missing cells become None rather than NaN so value coercion sees them as absent.
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")


def iter_candidate_results(
    paths: Sequence[str | Path],
) -> Iterator[tuple[Path, list[dict[str, Any]] | None, Exception | None]]:
    for raw_path in paths:
        path = Path(raw_path)
        logger.info("Trying to load CSV from: %s", path)
        try:
            rows = load_tabular(path)
        except (OSError, ValueError) as exc:
            logger.warning("Error loading CSV from %s: %s", path, exc)
            yield path, None, exc
            continue
        yield path, rows, None


def load_first_available(
    paths: Sequence[str | Path],
    convert: Callable[[list[dict[str, Any]]], Any] | None = None,
) -> tuple[Path, Any]:
    """Return rows from the first candidate that loads, trying each in order.

    With *convert*, the result is ``convert(rows)`` and a candidate whose rows
    fail to convert is skipped like one that fails to load.
    """
    for path, rows, _error in iter_candidate_results(paths):
        if rows is None:
            continue
        if convert is None:
            logger.info("Valid CSV data loaded from: %s", path)
            return path, rows
        try:
            converted = convert(rows)
        except StreamPanelError as exc:
            logger.warning("Error using CSV data from %s: %s", path, exc)
            continue
        logger.info("Valid CSV data loaded from: %s", path)
        return path, converted
    logger.error("Could not load CSV data from any of the specified paths")
    raise DataSourceExhaustedError([str(path) for path in paths])
