"""Device transports, visual waits and table navigation."""

from __future__ import annotations

from autodroid.engine.adb import AdbDevice
from autodroid.engine.base import BaseDevice
from autodroid.engine.limiter import FrequencyLimiter
from autodroid.engine.session import DeviceSession, WaitOutcome
from autodroid.engine.table import Axis, TableSelector, index_to_cell, tap_list_item

__all__ = [
    "AdbDevice",
    "Axis",
    "BaseDevice",
    "DeviceSession",
    "FrequencyLimiter",
    "TableSelector",
    "WaitOutcome",
    "index_to_cell",
    "tap_list_item",
]
