"""AdbDevice — BaseDevice over the ``adb`` command-line tool.

Screenshots use ``exec-out screencap -p`` (no temp file on the device);
gestures use ``shell input tap`` / ``shell input swipe``.
"""

from __future__ import annotations

import logging
import subprocess

from autodroid.core.exceptions import DeviceError
from autodroid.core.models import DeviceConfig
from autodroid.engine.base import BaseDevice

logger = logging.getLogger(__name__)


class AdbDevice(BaseDevice):
    """Android device driven through adb."""

    def __init__(self, config: DeviceConfig | None = None) -> None:
        self._config = config or DeviceConfig()

    @property
    def serial(self) -> str | None:
        return self._config.serial

    def __repr__(self) -> str:
        return f"AdbDevice({self.serial or 'default'})"

    # -- BaseDevice interface -------------------------------------------------

    def capture(self) -> bytes:
        """Screenshot as PNG bytes; empty bytes when the capture fails."""
        try:
            proc = self._adb("exec-out", "screencap", "-p", capture_output=True)
        except DeviceError as e:
            logger.warning("Screen capture failed on %r: %s", self, e)
            return b""
        return proc.stdout

    def tap(self, x: int, y: int) -> None:
        self._adb("shell", "input", "tap", str(x), str(y))

    def drag(self, x1: int, y1: int, x2: int, y2: int) -> None:
        ms = self._config.drag_duration_ms
        self._adb("shell", "input", "swipe", str(x1), str(y1), str(x2), str(y2), str(ms))

    def swipe(self, x1: int, y1: int, dx: int, dy: int, duration_s: float) -> None:
        ms = max(1, int(duration_s * 1000))
        x2, y2 = x1 + dx, y1 + dy
        self._adb("shell", "input", "swipe", str(x1), str(y1), str(x2), str(y2), str(ms))

    # -- internal helpers -----------------------------------------------------

    def _adb(self, *args: str, capture_output: bool = False) -> subprocess.CompletedProcess[bytes]:
        cmd = [self._config.adb_path]
        if self._config.serial:
            cmd += ["-s", self._config.serial]
        cmd += list(args)
        logger.debug("adb: %s", " ".join(cmd))
        try:
            return subprocess.run(  # noqa: S603
                cmd,
                check=True,
                capture_output=capture_output,
                timeout=self._config.command_timeout_s,
            )
        except FileNotFoundError as e:
            msg = f"adb executable not found: {self._config.adb_path}"
            raise DeviceError(msg) from e
        except subprocess.TimeoutExpired as e:
            msg = f"adb command timed out after {self._config.command_timeout_s}s: {args}"
            raise DeviceError(msg) from e
        except subprocess.CalledProcessError as e:
            msg = f"adb command failed (exit {e.returncode}): {args}"
            raise DeviceError(msg) from e
