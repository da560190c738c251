"""TableSelector — tap cells of a scrollable 2-D grid by logical position.

The selector tracks which cell sits at the top-left of the viewport
(``view_x`` / ``view_y``) and drags the table one cell at a time until the
requested cell is visible. When a drag brings the viewport flush with the
table's last row/column, an extra fling pins the table to its end, and the
last visible slot is tapped at the ``finale`` coordinate rather than on the
regular grid spacing.

``view_x`` / ``view_y`` are updated after each drag is issued, so an
interrupted navigation leaves the state consistent with the gestures that
actually reached the device.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from autodroid.core.models import Point, Size

if TYPE_CHECKING:
    from autodroid.engine.base import BaseDevice

logger = logging.getLogger(__name__)

FLING_DURATION_S = 1.0
RESET_DURATION_S = 3.0
LIST_SETTLE_S = 1.0


class Axis(Enum):
    """How a table's linear item sequence wraps."""

    HORIZONTAL = "horizontal"  # fills a row, then wraps to the next row
    VERTICAL = "vertical"  # fills a column, then wraps to the next column


def index_to_cell(seq: int, axis: Axis, table_width: int, table_height: int) -> Point:
    """Grid cell ``(col, row)`` of the *seq*-th item."""
    if seq < 0:
        msg = f"Item index must be >= 0, got {seq}"
        raise ValueError(msg)
    if axis is Axis.HORIZONTAL:
        return Point(x=seq % table_width, y=seq // table_width)
    return Point(x=seq // table_height, y=seq % table_height)


@dataclass
class TableSelector:
    """Navigation state for one scrollable table on screen.

    Attributes:
        origin: Screen position of the top-left visible cell; drags start here.
        finale: Screen position of the last column (x) / last row (y) when the
            table is scrolled to its end.
        item_interval: Screen distance between neighbouring cells.
        drag_interval: Drag distance that scrolls the table by one cell.
        view_width / view_height: Visible cells per row / column.
        table_width / table_height: Total cells per row / column.
        axis: Wrapping of the item sequence; needed only by :meth:`cell_of`.
        view_x / view_y: Table coordinates of the top-left visible cell.
    """

    origin: Point
    finale: Point
    item_interval: Size
    drag_interval: Size
    view_width: int
    view_height: int
    table_width: int
    table_height: int
    axis: Axis | None = None
    view_x: int = 0
    view_y: int = 0
    _wrap: Callable[[int], Point] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for name in ("view_width", "view_height", "table_width", "table_height"):
            if getattr(self, name) < 1:
                msg = f"{name} must be >= 1, got {getattr(self, name)}"
                raise ValueError(msg)
        if self.view_width > self.table_width or self.view_height > self.table_height:
            msg = (
                f"View {self.view_width}x{self.view_height} larger than "
                f"table {self.table_width}x{self.table_height}"
            )
            raise ValueError(msg)
        if not 0 <= self.view_x <= self.max_view_x or not 0 <= self.view_y <= self.max_view_y:
            msg = f"View offset ({self.view_x}, {self.view_y}) outside table"
            raise ValueError(msg)
        if self.axis is not None:
            axis, w, h = self.axis, self.table_width, self.table_height
            self._wrap = lambda seq: index_to_cell(seq, axis, w, h)

    @property
    def max_view_x(self) -> int:
        return self.table_width - self.view_width

    @property
    def max_view_y(self) -> int:
        return self.table_height - self.view_height

    @property
    def pinned_x(self) -> bool:
        """Viewport flush with the table's last column."""
        return self.view_x + self.view_width == self.table_width

    @property
    def pinned_y(self) -> bool:
        return self.view_y + self.view_height == self.table_height

    def cell_of(self, seq: int) -> Point:
        """Grid cell of the *seq*-th item, per this table's axis."""
        if self._wrap is None:
            msg = "TableSelector has no axis; cannot map item index to a cell"
            raise ValueError(msg)
        return self._wrap(seq)

    def tap_item(self, device: BaseDevice, cell: Point) -> Point:
        """Scroll *cell* into view and tap it.

        Returns:
            The screen point that was tapped.
        """
        if not 0 <= cell.x < self.table_width or not 0 <= cell.y < self.table_height:
            msg = f"Cell ({cell.x}, {cell.y}) outside {self.table_width}x{self.table_height} table"
            raise ValueError(msg)

        slot_x = self._scroll_x(device, cell.x)
        slot_y = self._scroll_y(device, cell.y)

        if self.pinned_x and slot_x == self.view_width - 1:
            x = self.finale.x
        else:
            x = self.origin.x + slot_x * self.item_interval.width
        if self.pinned_y and slot_y == self.view_height - 1:
            y = self.finale.y
        else:
            y = self.origin.y + slot_y * self.item_interval.height

        point = Point(x=x, y=y)
        logger.debug(
            "Tapping cell (%d, %d) at %s, view=(%d, %d)",
            cell.x,
            cell.y,
            point,
            self.view_x,
            self.view_y,
        )
        device.tap_point(point)
        return point

    def tap_seq(self, device: BaseDevice, seq: int) -> Point:
        """Tap the *seq*-th item."""
        return self.tap_item(device, self.cell_of(seq))

    def reset_table(self, device: BaseDevice) -> None:
        """Swipe across the whole table extent back towards the origin cell.

        Does not touch ``view_x`` / ``view_y``; pair with :meth:`reset`.
        """
        dx = self.drag_interval.width * self.table_width
        dy = self.drag_interval.height * self.table_height
        device.swipe_by(self.origin, dx, dy, RESET_DURATION_S)

    def reset(self) -> None:
        self.view_x = 0
        self.view_y = 0

    # -- internal helpers -----------------------------------------------------

    def _scroll_x(self, device: BaseDevice, col: int) -> int:
        step = self.drag_interval.width
        if col >= self.view_x + self.view_width:
            for _ in range(col - (self.view_width - 1) - self.view_x):
                device.drag_by(self.origin, -step, 0)
                self.view_x += 1
            if self.pinned_x:
                device.swipe_by(self.origin, -step, 0, FLING_DURATION_S)
        elif col < self.view_x:
            for _ in range(self.view_x - col):
                device.drag_by(self.origin, step, 0)
                self.view_x -= 1
        return col - self.view_x

    def _scroll_y(self, device: BaseDevice, row: int) -> int:
        step = self.drag_interval.height
        if row >= self.view_y + self.view_height:
            for _ in range(row - (self.view_height - 1) - self.view_y):
                device.drag_by(self.origin, 0, -step)
                self.view_y += 1
            if self.pinned_y:
                device.swipe_by(self.origin, 0, -step, FLING_DURATION_S)
        elif row < self.view_y:
            for _ in range(self.view_y - row):
                device.drag_by(self.origin, 0, step)
                self.view_y -= 1
        return row - self.view_y


def tap_list_item(
    device: BaseDevice,
    index: int,
    visible_count: int,
    origin: Point,
    drag_dy: int,
    tap_dy: int,
    settle_s: float = LIST_SETTLE_S,
    sleep: Callable[[float], None] = time.sleep,
) -> Point:
    """Tap the *index*-th entry of a single-column list.

    Entries past the visible ones are brought in by dragging the list up one
    entry at a time from a fresh (unscrolled) position; the entry is then
    tapped in the last visible slot. Blocks *settle_s* seconds after the tap
    so the screen it opens can render.
    """
    if index < visible_count:
        point = origin.offset(0, index * tap_dy)
    else:
        for _ in range(index - (visible_count - 1)):
            device.drag_by(origin, 0, -drag_dy)
        point = origin.offset(0, (visible_count - 1) * tap_dy)
    device.tap_point(point)
    sleep(settle_s)
    return point
