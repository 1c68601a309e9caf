from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from stream_panel.config import ChartConfig

logger = logging.getLogger(__name__)

TipOption = bool | Literal["custom"]

COLOR_SCHEMES = ("category10", "tableau10", "set1", "set2", "paired")
STREAM_OFFSETS = ("wiggle", "silhouette", "expand", "none")

FALLBACK_WIDTH = 600
FALLBACK_HEIGHT = 400
FALLBACK_BACKGROUND = "#ffffff"
FALLBACK_TEXT = "#000000"
FALLBACK_MARGINS = {"top": 20, "right": 30, "bottom": 40, "left": 60}
MARGIN_STYLE_KEYS = {
    "top": "marginTop",
    "right": "marginRight",
    "bottom": "marginBottom",
    "left": "marginLeft",
}

MIN_HOSTED_WIDTH = 300
MIN_HOSTED_HEIGHT = 200
HOSTED_WIDTH_PADDING = 20
HOSTED_HEIGHT_PADDING = 40

# (floor px, fraction of the matching chart dimension)
MARGIN_BOUNDS = {
    "top": (10, 0.10),
    "right": (10, 0.05),
    "bottom": (30, 0.15),
    "left": (40, 0.10),
}

WIDE_LEGEND_THRESHOLD = 600
WIDE_LEGEND_COLUMNS = 6
NARROW_LEGEND_COLUMNS = 3
NARROW_LEGEND_MAX_WIDTH = 200

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Margins:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class LegendLayout:
    columns: int
    width: float | None = None


@dataclass(frozen=True)
class ResolvedChartOptions:
    width: int
    height: int
    margins: Margins
    background_color: str
    text_color: str
    color_scheme: str
    stream_offset: str
    tip: TipOption
    legend: LegendLayout
    title: str = ""


def parse_int(value: Any) -> int | None:
    """Read a leading integer from text inputs such as ``"600"`` or ``"600px"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def parse_tip_option(value: Any) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "custom":
        return "custom"
    return value


def extract_color_value(color_config: Any, default: str) -> str:
    """Find a hex color wherever the style engine nested it."""
    if not color_config:
        return default

    def _get(node: Any, key: str) -> Any:
        return node.get(key) if isinstance(node, Mapping) else None

    candidates = [
        _get(_get(color_config, "value"), "color"),
        _get(_get(color_config, "color"), "value"),
        _get(color_config, "value"),
        _get(color_config, "color"),
        color_config,
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.startswith("#"):
            return candidate
    return default


def style_value(style: Mapping[str, Any] | None, key: str) -> Any:
    """Return the user-set value of a style entry, or ``None`` when unset/blank."""
    if not style:
        return None
    entry = style.get(key)
    if isinstance(entry, Mapping):
        entry = entry.get("value")
    if entry is None or entry == "":
        return None
    return entry


def clamp_margin(requested: float, floor: float, ceiling: float) -> float:
    return max(floor, min(requested, ceiling))


def resolve_margins(
    requested: Mapping[str, Any],
    width: int,
    height: int,
) -> Margins:
    resolved: dict[str, float] = {}
    for side, (floor, fraction) in MARGIN_BOUNDS.items():
        value = parse_int(requested.get(side))
        if value is None:
            value = FALLBACK_MARGINS[side]
        dimension = height if side in ("top", "bottom") else width
        resolved[side] = clamp_margin(value, floor, dimension * fraction)
    return Margins(**resolved)


def legend_layout(width: int) -> LegendLayout:
    if width > WIDE_LEGEND_THRESHOLD:
        return LegendLayout(columns=WIDE_LEGEND_COLUMNS)
    return LegendLayout(
        columns=NARROW_LEGEND_COLUMNS,
        width=min(NARROW_LEGEND_MAX_WIDTH, width * 0.8),
    )


def _first_int(*values: Any, fallback: int) -> int:
    for value in values:
        parsed = parse_int(value)
        if parsed is not None:
            return parsed
    return fallback


def _first_choice(choices: tuple[str, ...], *values: Any, fallback: str) -> str:
    for value in values:
        if value in choices:
            return str(value)
        if value is not None:
            logger.warning("Ignoring unsupported option %r; expected one of %s", value, choices)
    return fallback


def resolve_chart_options(
    style: Mapping[str, Any] | None,
    defaults: ChartConfig | None = None,
    container: tuple[int, int] | None = None,
) -> ResolvedChartOptions:
    """Resolve every rendering parameter: user style, then configured default, then fallback.

    *container* is the host-reported ``(width, height)``. When given, the
    configured size is shrunk to fit it, never below 300x200.
    """
    defaults = defaults or ChartConfig()

    width = _first_int(
        style_value(style, "chartWidth"), defaults.chart_width, fallback=FALLBACK_WIDTH
    )
    height = _first_int(
        style_value(style, "chartHeight"), defaults.chart_height, fallback=FALLBACK_HEIGHT
    )
    if container is not None:
        container_width, container_height = container
        width = max(MIN_HOSTED_WIDTH, min(width, container_width - HOSTED_WIDTH_PADDING))
        height = max(MIN_HOSTED_HEIGHT, min(height, container_height - HOSTED_HEIGHT_PADDING))

    requested_margins = {
        side: _first_int(
            style_value(style, style_key),
            getattr(defaults, f"margin_{side}"),
            fallback=FALLBACK_MARGINS[side],
        )
        for side, style_key in MARGIN_STYLE_KEYS.items()
    }
    margins = resolve_margins(requested_margins, width=width, height=height)

    tip = parse_tip_option(style_value(style, "tip"))
    if tip not in (True, False, "custom"):
        tip = parse_tip_option(defaults.tip)

    options = ResolvedChartOptions(
        width=width,
        height=height,
        margins=margins,
        background_color=extract_color_value(
            (style or {}).get("fillColor"),
            extract_color_value(defaults.fill_color, FALLBACK_BACKGROUND),
        ),
        text_color=extract_color_value(
            (style or {}).get("fontColor"),
            extract_color_value(defaults.font_color, FALLBACK_TEXT),
        ),
        color_scheme=_first_choice(
            COLOR_SCHEMES,
            style_value(style, "colorScheme"),
            defaults.color_scheme,
            fallback="category10",
        ),
        stream_offset=_first_choice(
            STREAM_OFFSETS,
            style_value(style, "streamOffset"),
            defaults.stream_offset,
            fallback="wiggle",
        ),
        tip=tip,
        legend=legend_layout(width),
        title=str(style_value(style, "title") or defaults.title),
    )
    logger.info(
        "Resolved chart size %sx%s, margins %s, offset=%s, tip=%s",
        options.width,
        options.height,
        options.margins,
        options.stream_offset,
        options.tip,
    )
    return options
