from __future__ import annotations

import json
from pathlib import Path

import typer

from stream_panel.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from stream_panel.errors import StreamPanelError
from stream_panel.io.host import HostPayload
from stream_panel.logging import configure_logging
from stream_panel.manifest import write_manifest
from stream_panel.pipeline import RenderResult, export_png, render_local, render_visualization

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        if DEFAULT_CONFIG_PATH.exists():
            return load_config(DEFAULT_CONFIG_PATH)
        return AppConfig()
    return load_config(config_path)


def _load_payload(payload_path: Path) -> dict:
    try:
        with payload_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Payload is not valid JSON: {exc}") from exc
    return data


def _parse_container(container: str | None) -> tuple[int, int] | None:
    if container is None:
        return None
    try:
        width_text, height_text = container.lower().split("x", 1)
        return int(width_text), int(height_text)
    except ValueError as exc:
        raise typer.BadParameter("Container size must look like WIDTHxHEIGHT, e.g. 800x600") from exc


def _write_result(result: RenderResult, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(result.html, encoding="utf-8")
    if result.ok:
        typer.echo(f"Stream graph written to: {out}")
    else:
        typer.echo(f"Render failed ({result.error}); error panel written to: {out}", err=True)
        raise typer.Exit(code=1)


@app.command()
def render(
    payload: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out/stream.html"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    container: str | None = typer.Option(
        None,
        help="Host container size as WIDTHxHEIGHT; the chart is shrunk to fit.",
    ),
) -> None:
    """Render a host data payload (JSON) into the panel HTML."""
    configure_logging()
    cfg = _load_app_config(config)
    result = render_visualization(
        _load_payload(payload),
        config=cfg,
        container=_parse_container(container),
    )
    _write_result(result, out)


@app.command()
def local(
    out: Path = typer.Option(Path("out/stream.html"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    csv: list[Path] | None = typer.Option(
        None,
        help="Candidate CSV files, tried in order. Defaults to local.sample_data_paths.",
    ),
) -> None:
    """Render the first loadable sample CSV in standalone mode."""
    configure_logging()
    cfg = _load_app_config(config)
    paths = [str(path) for path in csv] if csv else None
    _write_result(render_local(cfg, paths=paths), out)


@app.command()
def png(
    payload: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out/stream.png"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Export a static PNG of the stream graph."""
    configure_logging()
    cfg = _load_app_config(config)
    try:
        path = export_png(HostPayload.model_validate(_load_payload(payload)), out, config=cfg)
    except (StreamPanelError, ValueError) as exc:
        typer.echo(f"Export failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"PNG written to: {path}")


@app.command()
def manifest(
    out: Path = typer.Option(Path("build/manifest.json"), resolve_path=True),
) -> None:
    """Write the host registration manifest (data roles and style panel)."""
    configure_logging()
    path = write_manifest(out)
    typer.echo(f"Manifest written to: {path}")


if __name__ == "__main__":
    app()
