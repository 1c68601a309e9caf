from __future__ import annotations

from dataclasses import dataclass, field
from html import escape as _html_esc

import pandas as pd

from stream_panel.chart.options import ResolvedChartOptions
from stream_panel.io.schema import CanonicalColumns

PANEL_WIDTH = 275
# Space kept between the panel and the right margin.
PANEL_RESERVED_WIDTH = 280
PANEL_MIN_HEIGHT = 120
PANEL_ROW_HEIGHT = 16
PANEL_CHROME_HEIGHT = 40


@dataclass(frozen=True)
class TooltipEntry:
    category: str
    value: float
    color: str


@dataclass(frozen=True)
class TooltipPanel:
    date: pd.Timestamp
    anchor_x: float
    x: float
    width: int = PANEL_WIDTH
    height: int = PANEL_MIN_HEIGHT
    entries: list[TooltipEntry] = field(default_factory=list)


def format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.10g}"


def format_date(value: pd.Timestamp) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def clamp_panel_x(anchor_x: float, options: ResolvedChartOptions) -> float:
    return min(anchor_x, options.width - options.margins.right - PANEL_RESERVED_WIDTH)


def panel_height(entry_count: int) -> int:
    return max(PANEL_MIN_HEIGHT, entry_count * PANEL_ROW_HEIGHT + PANEL_CHROME_HEIGHT)


def date_to_x(
    value: pd.Timestamp,
    first: pd.Timestamp,
    last: pd.Timestamp,
    options: ResolvedChartOptions,
) -> float:
    left = options.margins.left
    span = options.width - options.margins.left - options.margins.right
    if last == first:
        return float(left)
    return left + (value - first) / (last - first) * span


def build_tooltip_panel(
    frame: pd.DataFrame,
    hovered_date: pd.Timestamp,
    anchor_x: float,
    options: ResolvedChartOptions,
    colors: dict[str, str],
    categories: list[str],
) -> TooltipPanel:
    """Group every positive category value at *hovered_date* into one panel."""
    at_date = frame.loc[
        (frame[CanonicalColumns.date] == hovered_date) & (frame[CanonicalColumns.value] > 0)
    ]
    totals = at_date.groupby(CanonicalColumns.category, sort=False)[CanonicalColumns.value].sum()
    rank = {category: index for index, category in enumerate(categories)}
    ordered = sorted(totals.index, key=lambda category: rank.get(category, len(rank)))
    entries = [
        TooltipEntry(
            category=str(category),
            value=float(totals[category]),
            color=colors.get(category, "#7f7f7f"),
        )
        for category in ordered
    ]
    return TooltipPanel(
        date=hovered_date,
        anchor_x=anchor_x,
        x=clamp_panel_x(anchor_x, options),
        height=panel_height(len(entries)),
        entries=entries,
    )


def build_tooltip_panels(
    frame: pd.DataFrame,
    options: ResolvedChartOptions,
    colors: dict[str, str],
    categories: list[str],
) -> list[TooltipPanel]:
    if frame.empty:
        return []
    dates = sorted(frame[CanonicalColumns.date].unique())
    first, last = pd.Timestamp(dates[0]), pd.Timestamp(dates[-1])
    panels = []
    for raw_date in dates:
        hovered = pd.Timestamp(raw_date)
        panels.append(
            build_tooltip_panel(
                frame,
                hovered,
                anchor_x=date_to_x(hovered, first, last, options),
                options=options,
                colors=colors,
                categories=categories,
            )
        )
    return panels


def panel_to_hover_html(panel: TooltipPanel) -> str:
    lines = [f"<b>{_html_esc(format_date(panel.date))}</b>"]
    for entry in panel.entries:
        lines.append(
            f"<span style='color:{entry.color}'>■</span> "
            f"{_html_esc(entry.category)}  <b>{format_value(entry.value)}</b>"
        )
    return "<br>".join(lines)
