"""autodroid CLI entry point."""

import logging

import typer

app = typer.Typer(
    name="autodroid",
    help="autodroid — template-driven Android screen automation",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        from autodroid import __version__

        typer.echo(f"autodroid {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Log matching and wait events at DEBUG level.",
    ),
) -> None:
    """autodroid — template-driven Android screen automation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# -- Register commands --------------------------------------------------------

from autodroid.cli.commands.capture_cmd import capture_command  # noqa: E402
from autodroid.cli.commands.config_cmd import config_app  # noqa: E402
from autodroid.cli.commands.match_cmd import match_command  # noqa: E402
from autodroid.cli.commands.templates_cmd import templates_app  # noqa: E402
from autodroid.cli.commands.wait_cmd import wait_command  # noqa: E402

app.add_typer(config_app, name="config")
app.add_typer(templates_app, name="templates")
app.command(name="match")(match_command)
app.command(name="capture")(capture_command)
app.command(name="wait")(wait_command)
