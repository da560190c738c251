"""Image buffers and decoding."""

from __future__ import annotations

from autodroid.imaging.image import ImageBuffer

__all__ = ["ImageBuffer"]
