"""BaseDevice ABC — device transport interface.

AdbDevice (and test fakes) implement this.
Provides raw screen capture and tap/drag/swipe gesture injection.
All calls are synchronous: they return once the gesture has been injected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autodroid.core.models import Point


class BaseDevice(ABC):
    """Device transport abstract interface."""

    @abstractmethod
    def capture(self) -> bytes:
        """Capture the current screen as encoded image bytes (may be empty)."""
        ...

    @abstractmethod
    def tap(self, x: int, y: int) -> None:
        """Tap at coordinates."""
        ...

    @abstractmethod
    def drag(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Slow drag from (x1, y1) to (x2, y2); no fling at release."""
        ...

    @abstractmethod
    def swipe(self, x1: int, y1: int, dx: int, dy: int, duration_s: float) -> None:
        """Swipe from (x1, y1) by (dx, dy) over *duration_s* seconds."""
        ...

    # -- helpers --------------------------------------------------------------

    def tap_point(self, point: Point) -> None:
        self.tap(point.x, point.y)

    def drag_by(self, start: Point, dx: int, dy: int) -> None:
        """Drag from *start* by a relative vector."""
        self.drag(start.x, start.y, start.x + dx, start.y + dy)

    def swipe_by(self, start: Point, dx: int, dy: int, duration_s: float) -> None:
        self.swipe(start.x, start.y, dx, dy, duration_s)
