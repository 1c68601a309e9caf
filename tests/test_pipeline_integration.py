from __future__ import annotations

from pathlib import Path

import pytest

from stream_panel.config import AppConfig
from stream_panel.errors import (
    DataSourceExhaustedError,
    InvalidDateError,
    MissingFieldsError,
    RenderError,
)
from stream_panel.pipeline import export_png, prepare_records, render_local, render_visualization
from stream_panel.io.host import HostPayload


def _payload(rows: list[dict], style: dict | None = None) -> dict:
    return {"tables": {"DEFAULT": rows}, "fields": {}, "style": style or {}}


def _row(day: str, category: str, value: object) -> dict:
    return {"date": [day], "category": [category], "value": [value]}


@pytest.fixture
def host_payload() -> dict:
    return _payload(
        [
            _row("20200103", "a", "3"),
            _row("20200101", "a", "1"),
            _row("20200102", "b", "abc"),
            _row("20200102", "a", 2),
            _row("20200101", "b", 4),
        ],
        style={"tip": {"value": "custom"}, "fillColor": {"value": {"color": "#0a0a0a"}}},
    )


def test_render_visualization_produces_panel_page(host_payload: dict) -> None:
    result = render_visualization(host_payload)

    assert result.ok
    assert 'id="mainsite-center"' in result.html
    assert 'id="stream-chart"' in result.html
    assert "background-color: #0a0a0a" in result.html
    assert result.options is not None and result.options.tip == "custom"


def test_render_visualization_missing_category_yields_error_panel() -> None:
    payload = _payload([{"date": ["20200101"], "value": [1]}])

    result = render_visualization(payload)

    assert isinstance(result.error, MissingFieldsError)
    assert "Data Error" in result.html
    assert "category" in result.html
    assert "mainsite-center" not in result.html


@pytest.mark.parametrize(
    ("payload", "expected", "message"),
    [
        (_payload([]), "EmptyDataError", "No data provided"),
        (_payload([_row("someday", "a", 1)]), "InvalidDateError", "Invalid dates found in 1 rows"),
        ({"tables": "not-a-mapping"}, "RenderError", "Error processing data"),
    ],
)
def test_render_visualization_converts_every_failure(payload, expected: str, message: str) -> None:
    result = render_visualization(payload)

    assert not result.ok
    assert type(result.error).__name__ == expected
    assert message in result.html


def test_render_visualization_all_zero_values_render_placeholder() -> None:
    result = render_visualization(_payload([_row("20200101", "a", 0)]))

    assert isinstance(result.error, RenderError)
    assert 'id="mainsite-center"' in result.html
    assert "No positive values" in result.html


def test_render_visualization_respects_container(host_payload: dict) -> None:
    result = render_visualization(host_payload, container=(400, 300))

    assert result.options is not None
    assert (result.options.width, result.options.height) == (380, 260)


def test_prepare_records_keeps_order_and_zero_coercion(host_payload: dict) -> None:
    frame = prepare_records(HostPayload.model_validate(host_payload), AppConfig())

    assert frame["category"].tolist() == ["a", "a", "b", "a", "b"]
    assert frame["value"].tolist() == [3.0, 1.0, 0.0, 2.0, 4.0]


def test_error_numeric_policy_surfaces_in_panel(host_payload: dict) -> None:
    config = AppConfig.model_validate({"normalization": {"numeric_policy": "error"}})

    result = render_visualization(host_payload, config=config)

    assert type(result.error).__name__ == "InvalidValueError"
    assert "abc" in result.html


def _write_csv(path: Path, header: str, *lines: str) -> Path:
    path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
    return path


def test_render_local_uses_first_loadable_candidate(tmp_path: Path) -> None:
    good = _write_csv(
        tmp_path / "babynames.csv",
        "year,name,percent,sex",
        "1880,Mary,0.07,girl",
        "1881,Mary,0.06,girl",
        "1880,John,0.08,boy",
    )
    config = AppConfig.model_validate({"chart": {"tip": "custom"}})

    result = render_local(config, paths=[str(tmp_path / "missing.csv"), str(good)])

    assert result.ok
    assert result.chart is not None and result.chart.figure is not None
    names = {trace.name for trace in result.chart.figure.data}
    assert {"Mary", "John"} <= names


def test_render_local_reports_exhausted_candidates(tmp_path: Path) -> None:
    result = render_local(AppConfig(), paths=[str(tmp_path / "nope.csv")])

    assert isinstance(result.error, DataSourceExhaustedError)
    assert "nope.csv" in result.html


def test_render_local_skips_candidate_with_unmappable_columns(tmp_path: Path) -> None:
    odd = _write_csv(tmp_path / "odd.csv", "when,what", "2020-01-01,a")
    good = _write_csv(
        tmp_path / "unemployment.csv",
        "date,industry_group,count",
        "2020-01-01,Mining,5",
        "2020-02-01,Mining,7",
    )

    result = render_local(AppConfig(), paths=[str(odd), str(good)])

    assert result.ok
    assert result.chart is not None and result.chart.figure is not None
    assert "Mining" in {trace.name for trace in result.chart.figure.data}


def test_render_local_unmappable_only_candidate_exhausts_sources(tmp_path: Path) -> None:
    path = _write_csv(tmp_path / "odd.csv", "when,what", "2020-01-01,a")

    result = render_local(AppConfig(), paths=[str(path)])

    assert isinstance(result.error, DataSourceExhaustedError)
    assert "odd.csv" in result.html


def test_export_png_writes_static_image(tmp_path: Path, host_payload: dict) -> None:
    out = export_png(HostPayload.model_validate(host_payload), tmp_path / "figs" / "stream.png")

    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_export_png_rejects_invalid_dates(tmp_path: Path) -> None:
    with pytest.raises(InvalidDateError):
        export_png(
            HostPayload.model_validate(_payload([_row("bad", "a", 1)])),
            tmp_path / "stream.png",
        )
