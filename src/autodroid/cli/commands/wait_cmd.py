"""autodroid wait — block until one of the named templates is on screen."""

from __future__ import annotations

from pathlib import Path

import typer

from autodroid.core.config import load_config
from autodroid.core.exceptions import AutodroidError
from autodroid.core.template_loader import load_templates
from autodroid.engine.adb import AdbDevice
from autodroid.engine.session import DeviceSession


def wait_command(
    names: list[str] = typer.Argument(help="Template names, highest priority first."),
    templates_path: str | None = typer.Option(
        None, "--templates", "-t", help="Template manifest (default: templates_file)."
    ),
    timeout_ms: int | None = typer.Option(
        None, "--timeout-ms", help="Timeout in ms (default: wait.default_timeout_ms)."
    ),
    serial: str | None = typer.Option(None, "--serial", "-s", help="Device serial."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Wait for a template to appear; exit code 1 on timeout."""
    try:
        overrides = {"device": {"serial": serial}} if serial else None
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            overrides=overrides,
        )
        library = load_templates(Path(templates_path or config.templates_file))
        wanted = library.select(*names)
        session = DeviceSession(AdbDevice(config.device), config.wait, config.matching)
        outcome = session.wait(*wanted, timeout_ms=timeout_ms)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(code=1) from None
    except AutodroidError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    if not outcome.ok:
        typer.echo(
            typer.style(
                f"Timed out after {outcome.elapsed_ms:.0f}ms ({outcome.iterations} polls)",
                fg=typer.colors.RED,
            ),
            err=True,
        )
        raise typer.Exit(code=1)

    typer.echo(
        f"{outcome.template}: "
        + typer.style("MATCHED", fg=typer.colors.GREEN)
        + f" after {outcome.elapsed_ms:.0f}ms ({outcome.iterations} polls)"
    )
