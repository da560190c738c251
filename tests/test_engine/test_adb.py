"""Tests for AdbDevice command construction and error mapping."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from autodroid.core.exceptions import DeviceError
from autodroid.core.models import DeviceConfig, Point
from autodroid.engine.adb import AdbDevice

RUN = "autodroid.engine.adb.subprocess.run"


def _completed(stdout: bytes = b"") -> subprocess.CompletedProcess[bytes]:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout)


class TestCommands:
    @patch(RUN)
    def test_capture(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(b"\x89PNG...")
        device = AdbDevice()
        assert device.capture() == b"\x89PNG..."
        args, kwargs = mock_run.call_args
        assert args[0] == ["adb", "exec-out", "screencap", "-p"]
        assert kwargs["capture_output"] is True
        assert kwargs["check"] is True
        assert kwargs["timeout"] == 15

    @patch(RUN)
    def test_serial_and_adb_path(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed()
        device = AdbDevice(DeviceConfig(adb_path="/opt/adb", serial="emulator-5554"))
        device.tap(10, 20)
        assert mock_run.call_args[0][0] == [
            "/opt/adb", "-s", "emulator-5554", "shell", "input", "tap", "10", "20",
        ]

    @patch(RUN)
    def test_drag_uses_configured_duration(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed()
        device = AdbDevice(DeviceConfig(drag_duration_ms=800))
        device.drag_by(Point(x=100, y=200), -90, 0)
        assert mock_run.call_args[0][0] == [
            "adb", "shell", "input", "swipe", "100", "200", "10", "200", "800",
        ]

    @patch(RUN)
    def test_swipe_converts_duration(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed()
        AdbDevice().swipe(100, 200, 450, 440, 3.0)
        assert mock_run.call_args[0][0] == [
            "adb", "shell", "input", "swipe", "100", "200", "550", "640", "3000",
        ]

    def test_repr(self) -> None:
        assert repr(AdbDevice()) == "AdbDevice(default)"
        assert repr(AdbDevice(DeviceConfig(serial="abc"))) == "AdbDevice(abc)"


class TestErrors:
    @patch(RUN, side_effect=FileNotFoundError("adb"))
    def test_missing_executable(self, mock_run: MagicMock) -> None:
        with pytest.raises(DeviceError, match="not found"):
            AdbDevice().tap(1, 2)

    @patch(RUN, side_effect=subprocess.TimeoutExpired(cmd="adb", timeout=15))
    def test_timeout(self, mock_run: MagicMock) -> None:
        with pytest.raises(DeviceError, match="timed out"):
            AdbDevice().tap(1, 2)

    @patch(RUN, side_effect=subprocess.CalledProcessError(1, "adb"))
    def test_nonzero_exit(self, mock_run: MagicMock) -> None:
        with pytest.raises(DeviceError, match="exit 1"):
            AdbDevice().swipe(0, 0, 1, 1, 0.5)

    @patch(RUN, side_effect=subprocess.CalledProcessError(1, "adb"))
    def test_capture_failure_returns_empty(self, mock_run: MagicMock) -> None:
        assert AdbDevice().capture() == b""
