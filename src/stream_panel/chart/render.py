from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd
import plotly.graph_objects as go

from stream_panel.chart.options import ResolvedChartOptions
from stream_panel.chart.stream import (
    StreamLayers,
    category_colors,
    compute_stream_layers,
    prepare_stream_frame,
)
from stream_panel.chart.tooltip import TooltipPanel, build_tooltip_panels, panel_to_hover_html
from stream_panel.errors import RenderError, StreamPanelError
from stream_panel.io.schema import REQUIRED_FIELDS, CanonicalColumns
from stream_panel.templating import template_env

logger = logging.getLogger(__name__)

LAYER_HOVERTEMPLATE = "%{x|%Y-%m-%d}<br>%{meta}: %{customdata:,}<extra></extra>"


@dataclass(frozen=True)
class ChartElement:
    html: str
    figure: go.Figure | None = None
    error_message: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.error_message is not None


def placeholder_element(message: str) -> ChartElement:
    html = template_env().get_template("placeholder.html.j2").render(message=message)
    return ChartElement(html=html, error_message=message)


def _legend_layout(options: ResolvedChartOptions) -> dict:
    plot_width = options.width - options.margins.left - options.margins.right
    legend_width = options.legend.width if options.legend.width is not None else plot_width
    return dict(
        orientation="h",
        x=0,
        xanchor="left",
        y=1.02,
        yanchor="bottom",
        entrywidth=max(1.0, legend_width / options.legend.columns),
        entrywidthmode="pixels",
        bgcolor=options.background_color,
        font=dict(color=options.text_color),
    )


def _add_layer_traces(
    fig: go.Figure,
    layers: StreamLayers,
    colors: dict[str, str],
    options: ResolvedChartOptions,
) -> None:
    dates = layers.values.index
    legend_rank = {category: index for index, category in enumerate(layers.category_order)}
    for category in layers.stack_order:
        color = colors[category]
        fig.add_trace(
            go.Scatter(
                x=dates,
                y=layers.lower[category],
                mode="lines",
                line=dict(width=0, shape="spline", color=color),
                hoverinfo="skip",
                showlegend=False,
                legendgroup=category,
            )
        )
        layer_trace = dict(
            x=dates,
            y=layers.upper[category],
            mode="lines",
            name=category,
            fill="tonexty",
            fillcolor=color,
            line=dict(width=0.5, shape="spline", color=color),
            legendgroup=category,
            legendrank=legend_rank[category],
            customdata=layers.values[category],
            meta=category,
        )
        if options.tip is True:
            # Labels travel through meta so "%{...}" in a category name stays literal.
            layer_trace["hovertemplate"] = LAYER_HOVERTEMPLATE
        else:
            layer_trace["hoverinfo"] = "skip"
        fig.add_trace(go.Scatter(**layer_trace))


def _add_custom_tooltip_trace(
    fig: go.Figure,
    frame: pd.DataFrame,
    layers: StreamLayers,
    colors: dict[str, str],
    options: ResolvedChartOptions,
) -> None:
    panels = build_tooltip_panels(frame, options, colors, layers.category_order)
    if not panels:
        return
    top = layers.upper.max(axis=1) if layers.stack_order else None
    fig.add_trace(
        go.Scatter(
            x=[panel.date for panel in panels],
            y=[float(top.loc[panel.date]) if top is not None else 0.0 for panel in panels],
            mode="markers",
            marker=dict(opacity=0, size=1),
            hovertext=[panel_to_hover_html(panel) for panel in panels],
            # The page script draws the panel from this geometry; plotly draws no label.
            customdata=[panel_geometry(panel) for panel in panels],
            hoverinfo="none",
            showlegend=False,
            name="tooltip",
        )
    )


def panel_geometry(panel: TooltipPanel) -> list[float]:
    return [panel.x, panel.width, panel.height, panel.anchor_x]


def tooltip_script(options: ResolvedChartOptions) -> str:
    """JavaScript that shows the grouped tooltip panel at its clamped position."""
    return (
        template_env()
        .get_template("tooltip.js.j2")
        .render(
            plot_top=options.margins.top,
            plot_height=options.height - options.margins.top - options.margins.bottom,
            background_color=options.background_color,
            text_color=options.text_color,
        )
    )


def build_stream_figure(frame: pd.DataFrame, options: ResolvedChartOptions) -> go.Figure:
    """Draw prepared records (positive values, date-sorted) as a plotly stream graph."""
    layers = compute_stream_layers(frame, offset=options.stream_offset)
    colors = category_colors(layers.category_order, options.color_scheme)

    fig = go.Figure()
    _add_layer_traces(fig, layers, colors, options)
    if options.tip == "custom":
        _add_custom_tooltip_trace(fig, frame, layers, colors, options)

    hovermode: str | bool = False
    if options.tip is True:
        hovermode = "closest"
    elif options.tip == "custom":
        hovermode = "x"

    fig.update_layout(
        width=options.width,
        height=options.height,
        margin=dict(
            t=options.margins.top,
            r=options.margins.right,
            b=options.margins.bottom,
            l=options.margins.left,
            autoexpand=False,
        ),
        paper_bgcolor=options.background_color,
        plot_bgcolor=options.background_color,
        font=dict(color=options.text_color),
        hovermode=hovermode,
        legend=_legend_layout(options),
        showlegend=True,
    )
    fig.update_xaxes(type="date", title_text="Date", showgrid=False)
    dates = layers.values.index
    if len(dates) > 1:
        # Pin the axis to the data so tooltip anchors line up with plotted dates.
        fig.update_xaxes(range=[dates[0], dates[-1]])
    fig.update_yaxes(title_text="Value", showgrid=True, zeroline=False)
    return fig


def draw_stream_graph(records: pd.DataFrame, options: ResolvedChartOptions) -> ChartElement:
    """Build the chart element, raising taxonomy errors instead of returning a placeholder."""
    if records.empty:
        raise RenderError("No data available for stream graph")
    missing = [column for column in REQUIRED_FIELDS if column not in records.columns]
    if missing:
        logger.error("Data missing required fields: %s", missing)
        raise RenderError(f"Data must contain fields: {', '.join(REQUIRED_FIELDS)}")

    prepared = prepare_stream_frame(records)
    logger.debug("Sorted data sample: %s", prepared.head(3).to_dict(orient="records"))
    if prepared.empty:
        raise RenderError("No positive values available for stream graph")

    try:
        fig = build_stream_figure(prepared, options)
        post_script = tooltip_script(options) if options.tip == "custom" else None
        figure_html = fig.to_html(
            full_html=False, include_plotlyjs="cdn", post_script=post_script
        )
    except Exception as exc:
        raise RenderError(f"Error creating stream graph: {exc}") from exc

    html = (
        template_env()
        .get_template("chart.html.j2")
        .render(
            figure_html=figure_html,
            background_color=options.background_color,
            text_color=options.text_color,
        )
    )
    logger.info(
        "Chart created with %s categories over %s dates",
        prepared[CanonicalColumns.category].nunique(),
        prepared[CanonicalColumns.date].nunique(),
    )
    return ChartElement(html=html, figure=fig)


def create_stream_graph(records: pd.DataFrame, options: ResolvedChartOptions) -> ChartElement:
    """Like :func:`draw_stream_graph`, but failures come back as a placeholder element."""
    try:
        return draw_stream_graph(records, options)
    except StreamPanelError as exc:
        logger.error("Error creating chart: %s", exc)
        return placeholder_element(str(exc))
