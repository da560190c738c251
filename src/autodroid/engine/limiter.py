"""FrequencyLimiter — minimum spacing between repeated sampling actions.

Decouples how often a polling loop *wants* to look at the screen from how
often it actually captures it.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from autodroid.core.models import WaitConfig

R = TypeVar("R")


class FrequencyLimiter:
    """Run actions no more often than once per *interval_s* seconds.

    The first ``run`` executes immediately; later calls sleep out whatever
    remains of the interval since the previous execution started.
    Single-owner: not safe to share across threads.
    """

    def __init__(
        self,
        interval_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval_s < 0:
            msg = f"interval must be >= 0, got {interval_s}"
            raise ValueError(msg)
        self.interval_s = interval_s
        self.last_run: float | None = None
        self._clock = clock
        self._sleep = sleep

    def run(self, action: Callable[[], R]) -> R:
        if self.last_run is not None:
            remaining = self.interval_s - (self._clock() - self.last_run)
            if remaining > 0:
                self._sleep(remaining)
        self.last_run = self._clock()
        return action()


def interval_for(timeout_ms: int, config: WaitConfig | None = None) -> float:
    """Polling interval for a wait of *timeout_ms*: short waits poll faster."""
    cfg = config or WaitConfig()
    if timeout_ms <= cfg.long_timeout_after_ms:
        return cfg.short_interval_s
    return cfg.long_interval_s
