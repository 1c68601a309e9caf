from __future__ import annotations

import pytest

from stream_panel.chart.options import (
    LegendLayout,
    Margins,
    extract_color_value,
    legend_layout,
    parse_int,
    parse_tip_option,
    resolve_chart_options,
    resolve_margins,
    style_value,
)
from stream_panel.config import ChartConfig


def test_requested_top_margin_is_clamped_to_tenth_of_height() -> None:
    margins = resolve_margins({"top": "200"}, width=300, height=400)

    assert margins.top <= 0.1 * 400
    assert margins.top >= 10
    assert margins.top == 40


def test_resolve_margins_keeps_reasonable_requests() -> None:
    margins = resolve_margins(
        {"top": "20", "right": "30", "bottom": "40", "left": "60"}, width=600, height=400
    )

    assert margins == Margins(top=20, right=30, bottom=40, left=60)


def test_resolve_margins_floors_win_on_small_charts() -> None:
    margins = resolve_margins(
        {"top": "0", "right": "30", "bottom": "40", "left": "60"}, width=300, height=200
    )

    assert margins == Margins(top=10, right=15, bottom=30, left=40)


def test_resolve_margins_falls_back_when_text_is_not_numeric() -> None:
    margins = resolve_margins({"top": "auto", "left": None}, width=1000, height=1000)

    assert margins.top == 20
    assert margins.left == 60
    assert margins.right == 30
    assert margins.bottom == 40


@pytest.mark.parametrize(
    ("width", "expected"),
    [
        (800, LegendLayout(columns=6)),
        (601, LegendLayout(columns=6)),
        (600, LegendLayout(columns=3, width=200)),
        (200, LegendLayout(columns=3, width=160)),
    ],
)
def test_legend_layout_switches_at_width_threshold(width: int, expected: LegendLayout) -> None:
    assert legend_layout(width) == expected


@pytest.mark.parametrize(
    "color_config",
    [
        {"value": {"color": "#123456"}},
        {"color": {"value": "#123456"}},
        {"value": "#123456"},
        {"color": "#123456"},
        "#123456",
    ],
)
def test_extract_color_value_walks_known_nesting(color_config: object) -> None:
    assert extract_color_value(color_config, "#ffffff") == "#123456"


@pytest.mark.parametrize("color_config", [None, {}, {"value": "red"}, {"color": {"value": 3}}])
def test_extract_color_value_defaults_without_hex(color_config: object) -> None:
    assert extract_color_value(color_config, "#ffffff") == "#ffffff"


def test_parse_tip_option_and_parse_int() -> None:
    assert parse_tip_option("true") is True
    assert parse_tip_option("false") is False
    assert parse_tip_option("custom") == "custom"
    assert parse_tip_option("other") == "other"
    assert parse_int("600px") == 600
    assert parse_int(" 42") == 42
    assert parse_int("wide") is None
    assert parse_int(None) is None


def test_style_value_reads_value_entries_and_treats_blank_as_unset() -> None:
    style = {"marginTop": {"value": "15"}, "marginLeft": {"value": ""}, "plain": "x"}

    assert style_value(style, "marginTop") == "15"
    assert style_value(style, "marginLeft") is None
    assert style_value(style, "plain") == "x"
    assert style_value(None, "marginTop") is None


def test_resolve_chart_options_prefers_user_style() -> None:
    style = {
        "chartWidth": {"value": "800"},
        "chartHeight": {"value": "500"},
        "colorScheme": {"value": "set2"},
        "streamOffset": {"value": "silhouette"},
        "marginTop": {"value": "25"},
        "fillColor": {"value": {"color": "#222222"}},
        "fontColor": {"color": {"value": "#eeeeee"}},
        "tip": {"value": "false"},
    }

    options = resolve_chart_options(style, ChartConfig(tip="custom"))

    assert (options.width, options.height) == (800, 500)
    assert options.color_scheme == "set2"
    assert options.stream_offset == "silhouette"
    assert options.margins.top == 25
    assert options.background_color == "#222222"
    assert options.text_color == "#eeeeee"
    assert options.tip is False
    assert options.legend == LegendLayout(columns=6)


def test_resolve_chart_options_falls_back_to_configured_defaults() -> None:
    defaults = ChartConfig(
        chart_width="300",
        chart_height="200",
        color_scheme="paired",
        stream_offset="expand",
        tip="custom",
        fill_color="#000000",
        font_color="#ffffff",
    )

    options = resolve_chart_options({"colorScheme": {"value": "rainbow"}}, defaults)

    assert (options.width, options.height) == (300, 200)
    assert options.color_scheme == "paired"
    assert options.stream_offset == "expand"
    assert options.tip == "custom"
    assert options.background_color == "#000000"
    assert options.text_color == "#ffffff"
    assert options.legend.columns == 3


def test_unparseable_style_margin_uses_configured_default() -> None:
    defaults = ChartConfig(margin_left="55", margin_top="15")

    options = resolve_chart_options(
        {"marginLeft": {"value": "abc"}, "marginTop": {"value": "auto"}}, defaults
    )

    assert options.margins.left == 55
    assert options.margins.top == 15


def test_unparseable_margin_everywhere_uses_hard_coded_fallback() -> None:
    options = resolve_chart_options(
        {"marginLeft": {"value": "abc"}}, ChartConfig(margin_left="wide")
    )

    assert options.margins.left == 60


def test_resolve_chart_options_uses_hard_coded_fallbacks() -> None:
    defaults = ChartConfig(chart_width="", chart_height="big", fill_color="white")

    options = resolve_chart_options(None, defaults)

    assert (options.width, options.height) == (600, 400)
    assert options.background_color == "#ffffff"
    assert options.stream_offset == "wiggle"
    assert options.tip is True


@pytest.mark.parametrize(
    ("container", "expected"),
    [
        ((500, 300), (480, 260)),
        ((2000, 2000), (600, 400)),
        ((200, 100), (300, 200)),
    ],
)
def test_resolve_chart_options_fits_host_container(
    container: tuple[int, int], expected: tuple[int, int]
) -> None:
    options = resolve_chart_options(None, ChartConfig(), container=container)

    assert (options.width, options.height) == expected
