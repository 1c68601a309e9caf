"""Host registration artifact: the data roles and style panel the dashboard exposes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from stream_panel.config import ChartConfig

COLOR_SCHEME_LABELS = {
    "category10": "Category 10",
    "tableau10": "Tableau 10",
    "set1": "Set 1",
    "set2": "Set 2",
    "paired": "Paired",
}
STREAM_OFFSET_LABELS = {
    "wiggle": "Wiggle",
    "silhouette": "Silhouette",
    "expand": "Expand",
    "none": "None",
}
TIP_LABELS = {"true": "Default", "false": "Off", "custom": "Grouped"}

# Host style panel defaults; independent of any local YAML overrides.
MANIFEST_DEFAULTS = ChartConfig()


def _data_role(role_id: str, label: str, concept: str) -> dict[str, Any]:
    return {
        "id": role_id,
        "label": label,
        "type": concept,
        "options": {"min": 1, "max": 1},
    }


def _select(element_id: str, label: str, labels: dict[str, str], default: str) -> dict[str, Any]:
    return {
        "id": element_id,
        "label": label,
        "type": "SELECT_SINGLE",
        "defaultValue": default,
        "options": [{"label": text, "value": value} for value, text in labels.items()],
    }


def _text_input(element_id: str, label: str, default: str) -> dict[str, Any]:
    return {"id": element_id, "label": label, "type": "TEXTINPUT", "defaultValue": default}


def build_manifest(defaults: ChartConfig = MANIFEST_DEFAULTS) -> dict[str, Any]:
    return {
        "data": [
            {
                "id": "concepts",
                "label": "Concepts",
                "elements": [
                    _data_role("date", "Date", "DIMENSION"),
                    _data_role("category", "Category", "DIMENSION"),
                    _data_role("value", "Value", "METRIC"),
                ],
            }
        ],
        "style": [
            {
                "id": "colors",
                "label": "Colors",
                "elements": [
                    {
                        "id": "fillColor",
                        "label": "Background color",
                        "type": "FILL_COLOR",
                        "defaultValue": defaults.fill_color,
                    },
                    {
                        "id": "fontColor",
                        "label": "Text color",
                        "type": "FONT_COLOR",
                        "defaultValue": defaults.font_color,
                    },
                    _select(
                        "colorScheme",
                        "Color scheme",
                        COLOR_SCHEME_LABELS,
                        defaults.color_scheme,
                    ),
                ],
            },
            {
                "id": "layout",
                "label": "Layout",
                "elements": [
                    _select(
                        "streamOffset",
                        "Stream offset",
                        STREAM_OFFSET_LABELS,
                        defaults.stream_offset,
                    ),
                    _text_input("marginTop", "Top margin", defaults.margin_top),
                    _text_input("marginRight", "Right margin", defaults.margin_right),
                    _text_input("marginBottom", "Bottom margin", defaults.margin_bottom),
                    _text_input("marginLeft", "Left margin", defaults.margin_left),
                    _text_input("chartWidth", "Chart width", defaults.chart_width),
                    _text_input("chartHeight", "Chart height", defaults.chart_height),
                    _select("tip", "Tooltip", TIP_LABELS, defaults.tip),
                ],
            },
        ],
    }


def write_manifest(path: Path, defaults: ChartConfig = MANIFEST_DEFAULTS) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(build_manifest(defaults), indent=2) + "\n", encoding="utf-8")
    return path
