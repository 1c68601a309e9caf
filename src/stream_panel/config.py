from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

ColorScheme = Literal["category10", "tableau10", "set1", "set2", "paired"]
StreamOffset = Literal["wiggle", "silhouette", "expand", "none"]
TipMode = Literal["true", "false", "custom"]


class ChartConfig(BaseModel):
    title: str = "Stream Graph Visualization"
    stream_offset: StreamOffset = "wiggle"
    color_scheme: ColorScheme = "category10"
    # Margins stay as text; the host style panel exposes them as text inputs.
    margin_top: str = "20"
    margin_right: str = "30"
    margin_bottom: str = "40"
    margin_left: str = "60"
    chart_width: str = "600"
    chart_height: str = "400"
    fill_color: str = "#ffffff"
    font_color: str = "#000000"
    tip: TipMode = "true"

    @field_validator(
        "margin_top",
        "margin_right",
        "margin_bottom",
        "margin_left",
        "chart_width",
        "chart_height",
        mode="before",
    )
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("tip", mode="before")
    @classmethod
    def _bool_tip_as_text(cls, value: Any) -> Any:
        # YAML reads an unquoted true/false as a bool.
        if isinstance(value, bool):
            return "true" if value else "false"
        return value


class LocalConfig(BaseModel):
    sample_data_paths: list[str] = Field(
        default_factory=lambda: ["data/babynames.csv"]
    )


class NormalizationConfig(BaseModel):
    numeric_policy: Literal["zero", "error"] = "zero"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    chart: ChartConfig = Field(default_factory=ChartConfig)
    local: LocalConfig = Field(default_factory=LocalConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_path(path_value: str, base_dir: Path) -> str:
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent
    config.local.sample_data_paths = [
        _resolve_path(value, base_dir) for value in config.local.sample_data_paths
    ]
    return config
