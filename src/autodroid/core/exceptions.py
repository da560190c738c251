"""autodroid exception hierarchy.

All exceptions inherit from AutodroidError.
WaitTimeoutError and MatchAssertionError are the only errors the visual-wait
operations surface; MatchError never leaves the matching engine.
"""

from __future__ import annotations

from collections.abc import Sequence


class AutodroidError(Exception):
    """Base exception for all autodroid errors."""


class ConfigError(AutodroidError):
    """Configuration file load/validation error."""


class DeviceError(AutodroidError):
    """Device transport error (adb missing, command failed, etc.)."""


class MatchError(AutodroidError):
    """Image matching error (malformed image, size mismatch, etc.)."""


class TemplateError(AutodroidError):
    """Template manifest parsing/validation error."""


class WaitError(AutodroidError):
    """A visual wait did not reach its target condition."""

    def __init__(self, message: str, templates: Sequence[object] = ()) -> None:
        self.templates = tuple(templates)
        super().__init__(message)


class WaitTimeoutError(WaitError):
    """A polling operation exceeded its deadline."""

    def __init__(self, timeout_ms: int, templates: Sequence[object] = ()) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"timeout after {timeout_ms} ms", templates)


class MatchAssertionError(WaitError):
    """A single-shot check found no matching template."""

    def __init__(self, templates: Sequence[object] = ()) -> None:
        names = ", ".join(str(t) for t in templates)
        super().__init__(f"assert matching [{names}]", templates)
