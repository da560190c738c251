"""autodroid templates — template manifest commands."""

from __future__ import annotations

from pathlib import Path

import typer

from autodroid.core.exceptions import TemplateError
from autodroid.core.template_loader import load_templates

templates_app = typer.Typer(
    name="templates",
    help="Template manifest commands.",
    no_args_is_help=True,
)


@templates_app.command(name="validate")
def templates_validate(
    path: str = typer.Argument(help="Template manifest YAML path."),
) -> None:
    """Load every template in a manifest and list it."""
    manifest = Path(path)
    if not manifest.is_file():
        typer.echo(
            typer.style(f"Manifest does not exist: {path}", fg=typer.colors.RED),
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        library = load_templates(manifest)
    except TemplateError as e:
        status = typer.style("ERROR", fg=typer.colors.RED)
        typer.echo(f"  {manifest.name}: {status} - {e}")
        raise typer.Exit(code=1) from None

    for name, tmpl in library.items():
        img = tmpl.image
        typer.echo(
            f"  {name}: {img.width}x{img.height}x{img.channels}, "
            f"threshold={tmpl.threshold:.3f}"
        )
    status = typer.style("OK", fg=typer.colors.GREEN)
    typer.echo(f"\n{manifest.name}: {status} ({len(library)} template(s))")
