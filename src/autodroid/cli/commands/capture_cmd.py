"""autodroid capture — save a device screenshot."""

from __future__ import annotations

from pathlib import Path

import typer

from autodroid.core.config import load_config
from autodroid.core.exceptions import AutodroidError
from autodroid.engine.adb import AdbDevice
from autodroid.engine.session import DeviceSession


def capture_command(
    output: str = typer.Argument(help="Output PNG path."),
    serial: str | None = typer.Option(None, "--serial", "-s", help="Device serial."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Capture the device screen to a file."""
    try:
        overrides = {"device": {"serial": serial}} if serial else None
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            overrides=overrides,
        )
        session = DeviceSession(AdbDevice(config.device), config.wait, config.matching)
        screen = session.capture()
        if screen is None:
            typer.echo("Error: device returned no image", err=True)
            raise typer.Exit(code=1)
        path = screen.save(output)
    except AutodroidError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"Saved {screen.width}x{screen.height} screenshot to {path}")
