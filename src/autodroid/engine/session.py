"""DeviceSession — visual-wait automaton bound to one device.

Every operation is built on :meth:`DeviceSession.which`: capture once, score
templates in the given order, first match wins. Polling loops pace their
captures through a FrequencyLimiter and check the deadline after each poll,
so the poll that crosses the deadline can still succeed.

Two API layers:

- outcome form (``wait``, ``check``, ``hold``, ``hold_find``) returns a
  :class:`WaitOutcome` and never raises for a missed condition;
- raising form (``await_match``, ``assert_match``, ``while_match``,
  ``while_not_match``, ``while_find``) unwraps the outcome and raises
  WaitTimeoutError / MatchAssertionError.

A session owns its device's last-match state. Use one session per device
and drive it from a single thread; sessions for different devices share
nothing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from autodroid.core.exceptions import MatchAssertionError, WaitTimeoutError
from autodroid.core.models import MatchingConfig, WaitConfig, WaitStatus
from autodroid.engine.limiter import FrequencyLimiter, interval_for
from autodroid.imaging.image import ImageBuffer

if TYPE_CHECKING:
    from autodroid.core.models import MatchResult, Point
    from autodroid.engine.base import BaseDevice
    from autodroid.matchers.template import Template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaitOutcome:
    """Result of a visual wait.

    ``MATCHED`` and ``ENDED`` are successes; ``TIMED_OUT`` and
    ``ASSERTION_FAILED`` are the non-success paths callers must handle.
    """

    status: WaitStatus
    template: Template | None = None
    iterations: int = 0
    elapsed_ms: float = 0.0
    templates: tuple[Template, ...] = ()
    timeout_ms: int | None = None

    @property
    def ok(self) -> bool:
        return self.status in (WaitStatus.MATCHED, WaitStatus.ENDED)

    def unwrap(self) -> WaitOutcome:
        """Return self on success, raise the matching WaitError otherwise."""
        if self.status == WaitStatus.TIMED_OUT:
            raise WaitTimeoutError(self.timeout_ms or 0, self.templates)
        if self.status == WaitStatus.ASSERTION_FAILED:
            raise MatchAssertionError(self.templates)
        return self


class DeviceSession:
    """Per-device automation context."""

    def __init__(
        self,
        device: BaseDevice,
        wait_config: WaitConfig | None = None,
        matching_config: MatchingConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.device = device
        self.last_match: Template | None = None
        self._wait_config = wait_config or WaitConfig()
        self._matching_config = matching_config or MatchingConfig()
        self._clock = clock
        self._sleep = sleep

    # -- single-shot ----------------------------------------------------------

    def capture(self) -> ImageBuffer | None:
        """Capture and decode the screen; None when no usable image came back."""
        return ImageBuffer.decode(self.device.capture())

    def which(self, *templates: Template) -> Template | None:
        """First template (in argument order) matching the current screen."""
        start = time.perf_counter()
        screen = self.capture()
        cap_ms = (time.perf_counter() - start) * 1000

        if screen is None:
            logger.debug("No usable screen captured; %s not matched", list(templates))
            self.last_match = None
            return None

        for tmpl in templates:
            t0 = time.perf_counter()
            diff = tmpl.diff(screen)
            matched = tmpl.accepts(diff)
            diff_ms = (time.perf_counter() - t0) * 1000
            logger.debug(
                "Matching %s... result=%s, difference=%.6f, diffTime=%.0f ms, capTime=%.0f ms",
                tmpl,
                matched,
                diff,
                diff_ms,
                cap_ms,
            )
            if matched:
                self.last_match = tmpl
                return tmpl

        self.last_match = None
        return None

    def match(self, *templates: Template) -> bool:
        return self.which(*templates) is not None

    def not_match(self, *templates: Template) -> bool:
        return self.which(*templates) is None

    def matched(self, *templates: Template) -> bool:
        """Query the last recorded match without capturing.

        No arguments: was anything matched. Otherwise: was the last match one
        of *templates*.
        """
        if not templates:
            return self.last_match is not None
        return self.last_match in templates

    def find(self, template: Template) -> Point | None:
        """Center of *template* on screen, or None when it is not there."""
        return self._find(template, edge=False)

    def find_edge(self, template: Template) -> Point | None:
        """Like :meth:`find`, correlating Canny edge maps instead of pixels."""
        return self._find(template, edge=True)

    def check(self, *templates: Template) -> WaitOutcome:
        """Single-shot assertion outcome; no polling."""
        logger.debug("Asserting %s...", list(templates))
        start = self._clock()
        tmpl = self.which(*templates)
        status = WaitStatus.MATCHED if tmpl is not None else WaitStatus.ASSERTION_FAILED
        return WaitOutcome(
            status=status,
            template=tmpl,
            iterations=1,
            elapsed_ms=self._elapsed_ms(start),
            templates=templates,
        )

    def assert_match(self, *templates: Template) -> Template:
        """Matched template; raises MatchAssertionError when nothing matches."""
        outcome = self.check(*templates).unwrap()
        assert outcome.template is not None  # noqa: S101
        return outcome.template

    # -- polling --------------------------------------------------------------

    def wait(self, *templates: Template, timeout_ms: int | None = None) -> WaitOutcome:
        """Poll until one of *templates* matches or the timeout elapses."""
        timeout = self._timeout(timeout_ms)
        logger.debug("Awaiting %s (timeout=%d ms)...", list(templates), timeout)
        limiter = self._limiter(timeout)
        start = self._clock()
        polls = 0
        while True:
            tmpl = limiter.run(lambda: self.which(*templates))
            polls += 1
            if tmpl is not None:
                return WaitOutcome(
                    status=WaitStatus.MATCHED,
                    template=tmpl,
                    iterations=polls,
                    elapsed_ms=self._elapsed_ms(start),
                    templates=templates,
                    timeout_ms=timeout,
                )
            if self._elapsed_ms(start) > timeout:
                return self._timed_out(templates, timeout, polls, start)

    def await_match(self, *templates: Template, timeout_ms: int | None = None) -> Template:
        """Matched template; raises WaitTimeoutError when the timeout elapses first."""
        outcome = self.wait(*templates, timeout_ms=timeout_ms).unwrap()
        assert outcome.template is not None  # noqa: S101
        return outcome.template

    def hold(
        self,
        *templates: Template,
        action: Callable[[], object],
        timeout_ms: int | None = None,
        while_matching: bool = True,
    ) -> WaitOutcome:
        """Run *action* once per poll for as long as the match condition holds.

        With ``while_matching=False`` the condition is "none of *templates*
        match". Ends with ``ENDED`` the moment the condition flips.
        """
        timeout = self._timeout(timeout_ms)
        limiter = self._limiter(timeout)
        start = self._clock()
        runs = 0
        while True:
            tmpl = limiter.run(lambda: self.which(*templates))
            if (tmpl is not None) != while_matching:
                return WaitOutcome(
                    status=WaitStatus.ENDED,
                    template=tmpl,
                    iterations=runs,
                    elapsed_ms=self._elapsed_ms(start),
                    templates=templates,
                    timeout_ms=timeout,
                )
            action()
            runs += 1
            if self._elapsed_ms(start) > timeout:
                return self._timed_out(templates, timeout, runs, start)

    def while_match(
        self,
        *templates: Template,
        action: Callable[[], object],
        timeout_ms: int | None = None,
    ) -> int:
        """Run *action* while the screen matches; returns the number of runs."""
        return self.hold(*templates, action=action, timeout_ms=timeout_ms).unwrap().iterations

    def while_not_match(
        self,
        *templates: Template,
        action: Callable[[], object],
        timeout_ms: int | None = None,
    ) -> int:
        """Run *action* until the screen matches; returns the number of runs."""
        outcome = self.hold(
            *templates, action=action, timeout_ms=timeout_ms, while_matching=False
        )
        return outcome.unwrap().iterations

    def hold_find(
        self,
        template: Template,
        action: Callable[[Point], object],
        timeout_ms: int | None = None,
    ) -> WaitOutcome:
        """Pass the found position to *action* each poll until *template* disappears."""
        timeout = self._timeout(timeout_ms)
        limiter = self._limiter(timeout)
        start = self._clock()
        runs = 0
        while True:
            pos = limiter.run(lambda: self.find(template))
            if pos is None:
                return WaitOutcome(
                    status=WaitStatus.ENDED,
                    iterations=runs,
                    elapsed_ms=self._elapsed_ms(start),
                    templates=(template,),
                    timeout_ms=timeout,
                )
            action(pos)
            runs += 1
            if self._elapsed_ms(start) > timeout:
                return self._timed_out((template,), timeout, runs, start)

    def while_find(
        self,
        template: Template,
        action: Callable[[Point], object],
        timeout_ms: int | None = None,
    ) -> int:
        return self.hold_find(template, action, timeout_ms).unwrap().iterations

    # -- pacing ---------------------------------------------------------------

    def pause(self, ms: int) -> None:
        """Block for *ms* milliseconds (e.g. to let an animation settle)."""
        self._sleep(ms / 1000)

    # -- internal helpers -----------------------------------------------------

    def _find(self, template: Template, edge: bool) -> Point | None:
        screen = self.capture()
        result: MatchResult
        if edge:
            result = template.find_edge(screen, self._matching_config)
        else:
            result = template.find(screen)
        found = template.accepts(result.difference) and result.location is not None
        pos = result.location if found else None
        logger.debug(
            "Finding %s%s... result=%s, difference=%.6f",
            "edge " if edge else "",
            template,
            pos,
            result.difference,
        )
        self.last_match = template if found else None
        return pos

    def _timeout(self, timeout_ms: int | None) -> int:
        return self._wait_config.default_timeout_ms if timeout_ms is None else timeout_ms

    def _limiter(self, timeout_ms: int) -> FrequencyLimiter:
        return FrequencyLimiter(
            interval_for(timeout_ms, self._wait_config),
            clock=self._clock,
            sleep=self._sleep,
        )

    def _elapsed_ms(self, start: float) -> float:
        return (self._clock() - start) * 1000

    def _timed_out(
        self,
        templates: tuple[Template, ...],
        timeout_ms: int,
        iterations: int,
        start: float,
    ) -> WaitOutcome:
        logger.debug("Timed out after %d ms waiting on %s", timeout_ms, list(templates))
        return WaitOutcome(
            status=WaitStatus.TIMED_OUT,
            iterations=iterations,
            elapsed_ms=self._elapsed_ms(start),
            templates=templates,
            timeout_ms=timeout_ms,
        )
