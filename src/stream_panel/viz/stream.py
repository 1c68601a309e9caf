from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from stream_panel.chart.options import ResolvedChartOptions
from stream_panel.chart.stream import (
    category_colors,
    compute_stream_layers,
    prepare_stream_frame,
)
from stream_panel.errors import RenderError
from stream_panel.viz.common import save_figure

DPI = 100


def plot_stream_png(
    records: pd.DataFrame,
    options: ResolvedChartOptions,
    output_path: Path,
) -> Path:
    prepared = prepare_stream_frame(records)
    if prepared.empty:
        raise RenderError("No positive values available for stream graph")
    layers = compute_stream_layers(prepared, offset=options.stream_offset)
    colors = category_colors(layers.category_order, options.color_scheme)

    fig, ax = plt.subplots(figsize=(options.width / DPI, options.height / DPI), dpi=DPI)
    fig.patch.set_facecolor(options.background_color)
    ax.set_facecolor(options.background_color)

    dates = layers.values.index
    for category in layers.stack_order:
        ax.fill_between(
            dates,
            layers.lower[category],
            layers.upper[category],
            color=colors[category],
            linewidth=0,
            label=category,
        )

    ax.set_xlabel("Date", color=options.text_color)
    ax.set_ylabel("Value", color=options.text_color)
    ax.tick_params(colors=options.text_color)
    ax.grid(axis="y", alpha=0.3)
    for spine in ax.spines.values():
        spine.set_color(options.text_color)

    handles, labels = ax.get_legend_handles_labels()
    by_label = dict(zip(labels, handles))
    ordered = [category for category in layers.category_order if category in by_label]
    legend = ax.legend(
        [by_label[category] for category in ordered],
        ordered,
        ncol=options.legend.columns,
        loc="lower left",
        bbox_to_anchor=(0, 1.02),
        frameon=False,
        fontsize=8,
    )
    for text in legend.get_texts():
        text.set_color(options.text_color)
    return save_figure(output_path, facecolor=options.background_color)
