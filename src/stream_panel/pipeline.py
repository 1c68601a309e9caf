from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from stream_panel.chart.options import ResolvedChartOptions, resolve_chart_options
from stream_panel.chart.render import ChartElement, create_stream_graph
from stream_panel.config import AppConfig
from stream_panel.errors import RenderError, StreamPanelError
from stream_panel.io.host import HostPayload, normalize_host_payload, tabular_to_host_payload
from stream_panel.io.read import load_first_available
from stream_panel.io.validate import validate_stream_records
from stream_panel.panel.page import render_error_page, render_page
from stream_panel.viz.stream import plot_stream_png

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    html: str
    chart: ChartElement | None = None
    options: ResolvedChartOptions | None = None
    error: StreamPanelError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def prepare_records(payload: HostPayload, config: AppConfig) -> pd.DataFrame:
    records = normalize_host_payload(payload, policy=config.normalization.numeric_policy)
    logger.info("Normalized %s host rows", len(records))
    return validate_stream_records(records)


def _render_payload(
    payload: HostPayload,
    config: AppConfig,
    container: tuple[int, int] | None,
) -> RenderResult:
    records = prepare_records(payload, config)
    options = resolve_chart_options(payload.style, config.chart, container=container)
    chart = create_stream_graph(records, options)
    error = RenderError(chart.error_message) if chart.is_placeholder else None
    return RenderResult(
        html=render_page(chart, options), chart=chart, options=options, error=error
    )


def _error_result(exc: StreamPanelError, config: AppConfig) -> RenderResult:
    logger.error("Render pass failed: %s", exc)
    return RenderResult(html=render_error_page(str(exc), title=config.chart.title), error=exc)


def render_visualization(
    payload: HostPayload | Mapping[str, Any],
    config: AppConfig | None = None,
    container: tuple[int, int] | None = None,
) -> RenderResult:
    """Run one hosted render pass; every failure ends in the error page, never an exception."""
    config = config or AppConfig()
    try:
        if not isinstance(payload, HostPayload):
            payload = HostPayload.model_validate(payload)
        return _render_payload(payload, config, container)
    except StreamPanelError as exc:
        return _error_result(exc, config)
    except Exception as exc:
        logger.exception("Unexpected error processing host data")
        return _error_result(RenderError(f"Error processing data: {exc}"), config)


def render_local(
    config: AppConfig | None = None,
    paths: list[str] | None = None,
) -> RenderResult:
    """Standalone mode: first loadable sample CSV, converted to the host shape."""
    config = config or AppConfig()
    candidates = paths if paths is not None else config.local.sample_data_paths
    try:
        source, payload = load_first_available(
            candidates,
            convert=lambda rows: tabular_to_host_payload(
                rows, config.chart, config.normalization
            ),
        )
        logger.info("Rendering local data from %s", source)
        return _render_payload(payload, config, container=None)
    except StreamPanelError as exc:
        return _error_result(exc, config)
    except Exception as exc:
        logger.exception("Unexpected error processing local data")
        return _error_result(RenderError(f"Error processing data: {exc}"), config)


def export_png(
    payload: HostPayload,
    output_path: Path,
    config: AppConfig | None = None,
) -> Path:
    config = config or AppConfig()
    records = prepare_records(payload, config)
    options = resolve_chart_options(payload.style, config.chart)
    return plot_stream_png(records, options, output_path)
