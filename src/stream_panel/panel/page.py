from __future__ import annotations

from stream_panel.chart.options import ResolvedChartOptions
from stream_panel.chart.render import ChartElement
from stream_panel.templating import template_env

CONTAINER_ID = "mainsite-center"


def render_page(chart: ChartElement, options: ResolvedChartOptions) -> str:
    """Attach a chart element to the panel container."""
    return (
        template_env()
        .get_template("page.html.j2")
        .render(
            title=options.title,
            chart_html=chart.html,
            background_color=options.background_color,
            text_color=options.text_color,
        )
    )


def render_error_page(message: str, title: str = "Stream Graph") -> str:
    """Replace the whole panel body with the error message."""
    return template_env().get_template("error.html.j2").render(title=title, message=message)
