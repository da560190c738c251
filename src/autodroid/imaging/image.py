"""ImageBuffer — immutable pixel grid over a read-only numpy array.

Pixels follow OpenCV conventions: uint8, BGR / BGRA channel order,
shape ``(height, width)`` or ``(height, width, channels)``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from autodroid.core.exceptions import MatchError
from autodroid.core.models import Rect, Size

logger = logging.getLogger(__name__)

_SUPPORTED_CHANNELS = (1, 3, 4)


class ImageBuffer:
    """Immutable in-memory image.

    Every transformation returns a new buffer; the wrapped array is marked
    read-only so nothing can mutate a buffer after it has been produced.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray) -> None:
        arr = _normalize(pixels)
        if np.may_share_memory(arr, pixels):
            arr = arr.copy()
        arr.flags.writeable = False
        self._pixels = arr

    # -- construction ---------------------------------------------------------

    @classmethod
    def decode(cls, data: bytes) -> ImageBuffer | None:
        """Decode PNG/JPEG bytes, keeping alpha. Empty or invalid input gives None."""
        if not data:
            return None
        try:
            arr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error:
            logger.debug("cv2.imdecode rejected %d bytes", len(data))
            return None
        if arr is None:
            return None
        try:
            return cls(arr)
        except MatchError:
            logger.debug("Decoded image has unsupported layout: %s", arr.shape)
            return None

    @classmethod
    def load(cls, path: str | Path) -> ImageBuffer:
        """Read an image file, keeping alpha.

        Raises:
            MatchError: If the file is missing or cannot be decoded.
        """
        p = Path(path)
        try:
            data = p.read_bytes()
        except OSError as e:
            msg = f"Cannot read image file: {p}: {e}"
            raise MatchError(msg) from e
        img = cls.decode(data)
        if img is None:
            msg = f"Cannot decode image file: {p}"
            raise MatchError(msg)
        return img

    @classmethod
    def from_array(cls, arr: np.ndarray) -> ImageBuffer:
        """Wrap a copy of *arr*."""
        return cls(arr)

    # -- properties -----------------------------------------------------------

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the pixel array."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self._pixels.ndim == 2 else int(self._pixels.shape[2])

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def is_empty(self) -> bool:
        return self._pixels.size == 0

    def __repr__(self) -> str:
        return f"ImageBuffer({self.width}x{self.height}x{self.channels})"

    # -- encoding -------------------------------------------------------------

    def encode(self, ext: str = ".png") -> bytes:
        ok, buf = cv2.imencode(ext, self._pixels)
        if not ok:
            msg = f"Failed to encode image as {ext}"
            raise MatchError(msg)
        return buf.tobytes()

    def save(self, path: str | Path) -> Path:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(self.encode(p.suffix or ".png"))
        return p

    # -- derivations ----------------------------------------------------------

    def crop(self, rect: Rect) -> ImageBuffer:
        x, y = rect.pos.x, rect.pos.y
        w, h = rect.size.width, rect.size.height
        if x < 0 or y < 0 or x + w > self.width or y + h > self.height:
            msg = f"Crop {rect} outside image {self.width}x{self.height}"
            raise MatchError(msg)
        return ImageBuffer(self._pixels[y : y + h, x : x + w])

    def blur(self, radius: float) -> ImageBuffer:
        """Gaussian blur with kernel ``int(radius) * 4 + 1`` and sigma *radius*."""
        k = int(radius) * 4 + 1
        return ImageBuffer(cv2.GaussianBlur(self._pixels, (k, k), radius))

    def canny(self, threshold1: float = 255.0 / 3, threshold2: float = 255.0) -> ImageBuffer:
        """Single-channel Canny edge map."""
        src = self._pixels
        if self.channels == 4:
            src = cv2.cvtColor(src, cv2.COLOR_BGRA2BGR)
        return ImageBuffer(cv2.Canny(src, threshold1, threshold2))

    def gray(self) -> ImageBuffer:
        if self.channels == 1:
            return self
        code = cv2.COLOR_BGRA2GRAY if self.channels == 4 else cv2.COLOR_BGR2GRAY
        return ImageBuffer(cv2.cvtColor(self._pixels, code))

    def invert(self) -> ImageBuffer:
        return ImageBuffer(cv2.bitwise_not(self.gray().pixels))

    def opaque(self) -> ImageBuffer:
        """Force a fully opaque alpha channel; gray images are returned unchanged."""
        if self.channels == 1:
            return self
        h, w = self.height, self.width
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        return ImageBuffer(np.concatenate([self._pixels[:, :, :3], alpha], axis=2))

    def alpha(self) -> ImageBuffer:
        """Alpha plane as a single-channel buffer."""
        if not self.has_alpha:
            msg = f"Image has no alpha channel ({self.channels} channels)"
            raise MatchError(msg)
        return ImageBuffer(self._pixels[:, :, 3])


def _normalize(pixels: np.ndarray) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    if arr.ndim not in (2, 3) or (arr.ndim == 3 and arr.shape[2] not in _SUPPORTED_CHANNELS):
        msg = f"Unsupported image shape: {arr.shape}"
        raise MatchError(msg)
    if arr.dtype == np.uint16:
        arr = (arr >> 8).astype(np.uint8)
    elif arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return np.ascontiguousarray(arr)
