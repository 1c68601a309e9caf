"""Stream layer geometry.

Records are pivoted to a date x category grid and stacked with one of four
baseline offsets:

- ``none``: layers stacked on a zero baseline.
- ``expand``: each date normalized so the stack spans 0..1.
- ``silhouette``: each date centered on zero.
- ``wiggle``: baseline chosen to minimize the weighted slope of every layer,
  then the whole stream centered on zero.

Wiggle uses inside-out ordering (layers peaking early sit in the middle);
every other offset stacks in category order.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from stream_panel.io.schema import CanonicalColumns

COLOR_SCHEMES: dict[str, list[str]] = {
    "category10": [
        "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
        "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
    ],
    "tableau10": [
        "#4e79a7", "#f28e2c", "#e15759", "#76b7b2", "#59a14f",
        "#edc949", "#af7aa1", "#ff9da7", "#9c755f", "#bab0ab",
    ],
    "set1": [
        "#e41a1c", "#377eb8", "#4daf4a", "#984ea3", "#ff7f00",
        "#ffff33", "#a65628", "#f781bf", "#999999",
    ],
    "set2": [
        "#66c2a5", "#fc8d62", "#8da0cb", "#e78ac3",
        "#a6d854", "#ffd92f", "#e5c494", "#b3b3b3",
    ],
    "paired": [
        "#a6cee3", "#1f78b4", "#b2df8a", "#33a02c", "#fb9a99", "#e31a1c",
        "#fdbf6f", "#ff7f00", "#cab2d6", "#6a3d9a", "#ffff99", "#b15928",
    ],
}


@dataclass(frozen=True)
class StreamLayers:
    values: pd.DataFrame
    lower: pd.DataFrame
    upper: pd.DataFrame
    stack_order: list[str]
    category_order: list[str]


def prepare_stream_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Drop non-positive contributions and sort by date."""
    working = frame.loc[frame[CanonicalColumns.value] > 0].copy()
    working = working.sort_values(CanonicalColumns.date, kind="mergesort")
    return working.reset_index(drop=True)


def category_order(frame: pd.DataFrame) -> list[str]:
    return sorted(frame[CanonicalColumns.category].astype(str).unique().tolist())


def category_colors(categories: list[str], scheme: str) -> dict[str, str]:
    palette = COLOR_SCHEMES.get(scheme, COLOR_SCHEMES["category10"])
    return {category: palette[index % len(palette)] for index, category in enumerate(categories)}


def pivot_stream_values(frame: pd.DataFrame) -> pd.DataFrame:
    """Sum values per (date, category); the secondary dimension folds into its category."""
    wide = frame.pivot_table(
        index=CanonicalColumns.date,
        columns=CanonicalColumns.category,
        values=CanonicalColumns.value,
        aggfunc="sum",
        fill_value=0.0,
    )
    wide.columns = [str(column) for column in wide.columns]
    return wide.sort_index().astype(float)


def inside_out_order(wide: pd.DataFrame) -> list[str]:
    if wide.empty:
        return list(wide.columns)
    values = wide.to_numpy()
    peaks = values.argmax(axis=0)
    sums = values.sum(axis=0)
    by_peak = sorted(range(len(wide.columns)), key=lambda index: (peaks[index], index))

    top_total = 0.0
    bottom_total = 0.0
    tops: list[int] = []
    bottoms: list[int] = []
    for index in by_peak:
        if top_total < bottom_total:
            top_total += sums[index]
            tops.append(index)
        else:
            bottom_total += sums[index]
            bottoms.append(index)
    ordered = list(reversed(bottoms)) + tops
    return [wide.columns[index] for index in ordered]


def _wiggle_baseline(stacked: np.ndarray) -> np.ndarray:
    # stacked: (n_layers, n_dates), rows in stack order
    n_dates = stacked.shape[1]
    baseline = np.zeros(n_dates, dtype=float)
    level = 0.0
    for j in range(1, n_dates):
        current = stacked[:, j]
        delta = current - stacked[:, j - 1]
        slope = np.cumsum(delta) - delta / 2.0
        total = current.sum()
        if total:
            level -= float((slope * current).sum()) / total
        baseline[j] = level
    return baseline


def compute_stream_layers(frame: pd.DataFrame, offset: str = "wiggle") -> StreamLayers:
    """Compute lower/upper bounds of each category layer for *offset*."""
    wide = pivot_stream_values(frame)
    categories = list(wide.columns)
    stack_order = inside_out_order(wide) if offset == "wiggle" else categories

    raw = wide[stack_order].to_numpy().T if stack_order else np.zeros((0, len(wide)))
    ordered = raw
    if offset == "expand":
        totals = ordered.sum(axis=0)
        safe = np.where(totals == 0, 1.0, totals)
        ordered = np.where(totals == 0, 0.0, ordered / safe)

    cumulative = np.cumsum(ordered, axis=0)
    totals = cumulative[-1] if len(cumulative) else np.zeros(len(wide))
    if offset == "silhouette":
        baseline = -totals / 2.0
    elif offset == "wiggle":
        baseline = _wiggle_baseline(ordered)
        if len(wide):
            top = baseline + totals
            baseline = baseline - (baseline.min() + top.max()) / 2.0
    else:
        baseline = np.zeros(len(wide), dtype=float)

    upper = baseline + cumulative
    lower = upper - ordered
    index = wide.index
    return StreamLayers(
        values=pd.DataFrame(raw.T, index=index, columns=stack_order),
        lower=pd.DataFrame(lower.T, index=index, columns=stack_order),
        upper=pd.DataFrame(upper.T, index=index, columns=stack_order),
        stack_order=stack_order,
        category_order=categories,
    )
