from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stream_panel.config import ChartConfig, NormalizationConfig
from stream_panel.errors import EmptyDataError
from stream_panel.io.schema import (
    ROLE_TO_CANONICAL,
    CanonicalColumns,
    match_role,
    resolve_column_mapping,
)
from stream_panel.preprocess.dates import parse_date
from stream_panel.preprocess.values import NumericPolicy, coerce_value

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "DEFAULT"
SHORTHAND_KEYS = (
    CanonicalColumns.date,
    CanonicalColumns.category,
    CanonicalColumns.other,
    CanonicalColumns.value,
)


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    type: str | None = None
    concept: str | None = None


class HostPayload(BaseModel):
    """Data message delivered by the dashboard host: tables, field metadata, style."""

    tables: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    fields: dict[str, list[FieldSpec]] = Field(default_factory=dict)
    style: dict[str, Any] = Field(default_factory=dict)

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self.tables.get(DEFAULT_TABLE, [])


def _is_cell_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _field_roles(fields: Mapping[str, Sequence[FieldSpec]]) -> dict[str, list[str | None]]:
    return {
        key: [match_role(spec.name, include_aliases=True) for spec in specs]
        for key, specs in fields.items()
    }


def _canonical_cell(canonical: str, raw_value: Any, policy: NumericPolicy) -> Any:
    if canonical == CanonicalColumns.date:
        return parse_date(raw_value)
    if canonical == CanonicalColumns.value:
        return coerce_value(raw_value, policy=policy)
    return raw_value


def normalize_host_payload(
    payload: HostPayload,
    policy: NumericPolicy = "zero",
) -> list[dict[str, Any]]:
    """Turn array-wrapped host rows into canonical records, one per input row.

    Shorthand keys (``date``/``category``/``other``/``value``) win over roles
    inferred from field metadata names.
    """
    roles_by_key = _field_roles(payload.fields)
    logger.debug("Field roles: %s", roles_by_key)

    records: list[dict[str, Any]] = []
    for row in payload.rows:
        record: dict[str, Any] = {}
        for key in SHORTHAND_KEYS:
            cell = row.get(key)
            if _is_cell_sequence(cell) and len(cell) > 0:
                record[key] = _canonical_cell(key, cell[0], policy)

        for key, cell in row.items():
            if not _is_cell_sequence(cell):
                continue
            field_roles = roles_by_key.get(key, [])
            for index, raw_value in enumerate(cell):
                role = field_roles[index] if index < len(field_roles) else None
                if role is None:
                    continue
                canonical = ROLE_TO_CANONICAL[role]
                if canonical in record:
                    continue
                record[canonical] = _canonical_cell(canonical, raw_value, policy)
        records.append(record)
    return records


def _default_style(chart: ChartConfig) -> dict[str, Any]:
    def _text(value: str, default: str) -> dict[str, str]:
        return {"value": value, "defaultValue": default}

    return {
        "streamOffset": _text(chart.stream_offset, "wiggle"),
        "title": _text(chart.title, "Stream Graph"),
        "colorScheme": _text(chart.color_scheme, "category10"),
        "fillColor": {"color": {"value": chart.fill_color}},
        "fontColor": {"color": {"value": chart.font_color}},
        "marginTop": _text(chart.margin_top, "20"),
        "marginRight": _text(chart.margin_right, "30"),
        "marginBottom": _text(chart.margin_bottom, "40"),
        "marginLeft": _text(chart.margin_left, "60"),
        "chartWidth": _text(chart.chart_width, "600"),
        "chartHeight": _text(chart.chart_height, "400"),
        "tip": _text(chart.tip, "true"),
    }


def tabular_to_host_payload(
    rows: Sequence[Mapping[str, Any]],
    chart: ChartConfig | None = None,
    normalization: NormalizationConfig | None = None,
) -> HostPayload:
    """Wrap flat CSV rows in the host payload shape so one normalizer serves both modes."""
    if not rows:
        raise EmptyDataError("No CSV data provided")
    chart = chart or ChartConfig()
    policy = (normalization or NormalizationConfig()).numeric_policy

    columns = list(rows[0].keys())
    mapping = resolve_column_mapping(columns)
    logger.info("Detected column mapping: %s", mapping)

    rename = mapping.as_rename_map()
    table: list[dict[str, Any]] = []
    for row in rows:
        canonical = {rename[column]: value for column, value in row.items() if column in rename}
        wrapped: dict[str, Any] = {
            CanonicalColumns.date: [parse_date(canonical.get(CanonicalColumns.date))],
            CanonicalColumns.category: [canonical.get(CanonicalColumns.category)],
            CanonicalColumns.value: [
                coerce_value(canonical.get(CanonicalColumns.value), policy=policy)
            ],
        }
        if CanonicalColumns.other in canonical:
            wrapped[CanonicalColumns.other] = [canonical[CanonicalColumns.other]]
        table.append(wrapped)

    fields = {
        CanonicalColumns.date: [
            FieldSpec(id="date", name="Date", type="DATE", concept="DIMENSION")
        ],
        CanonicalColumns.category: [
            FieldSpec(id="category", name="Category", type="TEXT", concept="DIMENSION")
        ],
        CanonicalColumns.value: [
            FieldSpec(id="value", name="Value", type="NUMBER", concept="METRIC")
        ],
    }
    return HostPayload(
        tables={DEFAULT_TABLE: table},
        fields=fields,
        style=_default_style(chart),
    )
