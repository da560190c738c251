"""Shared fakes: a deterministic clock and a scripted device."""

from __future__ import annotations

import os
from pathlib import Path  # noqa: TC003

import pytest

from autodroid.engine.base import BaseDevice


class FakeClock:
    """Monotonic clock that only advances when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeDevice(BaseDevice):
    """Device that replays scripted frames and records every gesture.

    Frames are consumed one per capture; the last frame repeats forever.
    An empty script captures empty bytes.
    """

    def __init__(self, frames: list[bytes] | None = None) -> None:
        self.frames = list(frames or [])
        self.captures = 0
        self.gestures: list[tuple[object, ...]] = []

    def capture(self) -> bytes:
        self.captures += 1
        if not self.frames:
            return b""
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0]

    def tap(self, x: int, y: int) -> None:
        self.gestures.append(("tap", x, y))

    def drag(self, x1: int, y1: int, x2: int, y2: int) -> None:
        self.gestures.append(("drag", x1, y1, x2, y2))

    def swipe(self, x1: int, y1: int, dx: int, dy: int, duration_s: float) -> None:
        self.gestures.append(("swipe", x1, y1, dx, dy, duration_s))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated cwd with no AUTODROID_ environment variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("AUTODROID_"):
            monkeypatch.delenv(key, raising=False)
    return tmp_path
