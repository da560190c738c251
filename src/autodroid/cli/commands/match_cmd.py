"""autodroid match — score a template against a saved screenshot."""

from __future__ import annotations

from pathlib import Path

import typer

from autodroid.core.config import load_config
from autodroid.core.exceptions import AutodroidError
from autodroid.imaging.image import ImageBuffer
from autodroid.matchers.template import Template


def match_command(
    screenshot: str = typer.Argument(help="Screenshot image path."),
    template: str = typer.Argument(help="Template image path."),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Accept threshold (default: matching.default_threshold)."
    ),
    locate: bool = typer.Option(False, "--locate", "-l", help="Search the whole screenshot."),
    edge: bool = typer.Option(False, "--edge", "-e", help="Locate on Canny edge maps."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Report the difference between a screenshot and a template."""
    try:
        config = load_config(config_path=Path(config_path) if config_path else None)
        limit = threshold if threshold is not None else config.matching.default_threshold
        tmpl = Template.load(Path(template).stem, template, limit)
        scene = ImageBuffer.load(screenshot)
    except AutodroidError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    if edge:
        result = tmpl.find_edge(scene, config.matching)
    elif locate:
        result = tmpl.find(scene)
    else:
        result = None

    difference = result.difference if result is not None else tmpl.diff(scene)
    matched = tmpl.accepts(difference)
    status = (
        typer.style("MATCH", fg=typer.colors.GREEN)
        if matched
        else typer.style("NO MATCH", fg=typer.colors.RED)
    )
    typer.echo(f"{tmpl}: {status} difference={difference:.6f} threshold={limit:.6f}")
    if result is not None and result.location is not None:
        typer.echo(f"  center: ({result.location.x}, {result.location.y})")

    if not matched:
        raise typer.Exit(code=1)
