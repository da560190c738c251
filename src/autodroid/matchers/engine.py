"""Match engine — masked normalized cross-correlation via cv2.matchTemplate.

Scores are reported as a *difference* (``1 - TM_CCORR_NORMED``) so that
thresholds read as "difference must be below X". Matching never raises:
degenerate input and OpenCV failures are logged and reported as 1.0.
"""

from __future__ import annotations

import logging
import math
import time

import cv2
import numpy as np

from autodroid.core.exceptions import MatchError
from autodroid.core.models import MatchingConfig, MatchResult, Point, Rect
from autodroid.imaging.image import ImageBuffer

logger = logging.getLogger(__name__)

MAX_DIFFERENCE = 1.0

_DEFAULT_CONFIG = MatchingConfig()


def score(
    scene: ImageBuffer | None,
    template: ImageBuffer | None,
    mask: ImageBuffer | None = None,
) -> float:
    """Difference between *scene* and *template* anchored at the top-left corner.

    When *mask* is omitted and the template has alpha, the alpha channel is
    the mask: transparent template pixels never affect the score.
    """
    if _degenerate(scene) or _degenerate(template):
        return MAX_DIFFERENCE
    assert scene is not None and template is not None  # noqa: S101
    try:
        result = _correlate(scene, template, mask)
        return _to_difference(float(result[0, 0]))
    except Exception as e:  # noqa: BLE001
        logger.warning("Error in matching %r against %r: %s", template, scene, e)
        return MAX_DIFFERENCE


def locate(
    scene: ImageBuffer | None,
    template: ImageBuffer | None,
    mask: ImageBuffer | None = None,
) -> MatchResult:
    """Best match of *template* anywhere inside *scene*.

    Returns:
        MatchResult whose location is the center of the best match box,
        or a location-less result with difference 1.0 on failure.
    """
    start = time.perf_counter()
    if _degenerate(scene) or _degenerate(template):
        return MatchResult(elapsed_ms=_elapsed_ms(start))
    assert scene is not None and template is not None  # noqa: S101
    try:
        result = _correlate(scene, template, mask)
    except Exception as e:  # noqa: BLE001
        logger.warning("Error in locating %r in %r: %s", template, scene, e)
        return MatchResult(elapsed_ms=_elapsed_ms(start))

    _, max_val, _, max_loc = cv2.minMaxLoc(result)
    top_left = Point(x=int(max_loc[0]), y=int(max_loc[1]))
    center = Rect(pos=top_left, size=template.size).center()
    return MatchResult(
        difference=_to_difference(float(max_val)),
        location=center,
        elapsed_ms=_elapsed_ms(start),
    )


def locate_edges(
    scene: ImageBuffer | None,
    template: ImageBuffer | None,
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Edge-based :func:`locate`: blur + Canny the scene before correlating.

    Single-channel templates are taken to be edge maps already; colour
    templates go through the same blur + Canny pass as the scene.
    """
    if _degenerate(scene) or _degenerate(template):
        return MatchResult()
    assert scene is not None and template is not None  # noqa: S101
    cfg = config or _DEFAULT_CONFIG
    try:
        scene_edges = edges(scene, cfg)
        tmpl_edges = template if template.channels == 1 else edges(template, cfg)
    except Exception as e:  # noqa: BLE001
        logger.warning("Error in edge filtering %r: %s", scene, e)
        return MatchResult()
    return locate(scene_edges, tmpl_edges)


def edges(image: ImageBuffer, config: MatchingConfig | None = None) -> ImageBuffer:
    cfg = config or _DEFAULT_CONFIG
    return image.blur(cfg.edge_blur_radius).canny(cfg.canny_low, cfg.canny_high)


# -- internal helpers ---------------------------------------------------------


def _degenerate(image: ImageBuffer | None) -> bool:
    return image is None or image.is_empty


def _common_layout(scene: ImageBuffer, template: ImageBuffer) -> tuple[ImageBuffer, ImageBuffer]:
    """Opaque both images; fall back to gray when one side is single-channel."""
    scene_n = scene.opaque()
    tmpl_n = template.opaque()
    if scene_n.channels != tmpl_n.channels:
        scene_n = scene_n.gray()
        tmpl_n = tmpl_n.gray()
    return scene_n, tmpl_n


def _mask_for(template: ImageBuffer, mask: ImageBuffer | None) -> np.ndarray | None:
    if mask is None:
        if not template.has_alpha:
            return None
        mask = template.alpha()
    if mask.size != template.size:
        msg = f"Mask size {mask.size} does not match template size {template.size}"
        raise MatchError(msg)
    plane = mask.gray().pixels
    if not plane.any():
        msg = "Mask excludes every template pixel"
        raise MatchError(msg)
    return plane


def _correlate(
    scene: ImageBuffer,
    template: ImageBuffer,
    mask: ImageBuffer | None,
) -> np.ndarray:
    if template.width > scene.width or template.height > scene.height:
        msg = (
            f"Template {template.width}x{template.height} larger than "
            f"scene {scene.width}x{scene.height}"
        )
        raise MatchError(msg)
    mask_plane = _mask_for(template, mask)
    scene_n, tmpl_n = _common_layout(scene, template)
    weights = _weights(tmpl_n, mask_plane)
    if not tmpl_n.pixels[weights > 0].any():
        return _blank_correlation(scene_n, weights)
    if mask_plane is None:
        result = cv2.matchTemplate(scene_n.pixels, tmpl_n.pixels, cv2.TM_CCORR_NORMED)
    else:
        result = cv2.matchTemplate(
            scene_n.pixels, tmpl_n.pixels, cv2.TM_CCORR_NORMED, mask=mask_plane
        )
    # Flat masked regions divide by zero; they can never be the best match.
    return np.nan_to_num(result, nan=0.0, posinf=0.0, neginf=0.0)


def _weights(template: ImageBuffer, mask_plane: np.ndarray | None) -> np.ndarray:
    if mask_plane is None:
        return np.ones((template.height, template.width), dtype=np.float32)
    return (mask_plane > 0).astype(np.float32)


def _blank_correlation(scene: ImageBuffer, weights: np.ndarray) -> np.ndarray:
    """Correlation of an all-zero template: 1 where the scene window is blank too."""
    lit = scene.pixels if scene.channels == 1 else scene.pixels.max(axis=2)
    lit_count = cv2.matchTemplate((lit > 0).astype(np.float32), weights, cv2.TM_CCORR)
    return (lit_count < 0.5).astype(np.float32)


def _to_difference(correlation: float) -> float:
    if not math.isfinite(correlation):
        return MAX_DIFFERENCE
    return min(MAX_DIFFERENCE, max(0.0, 1.0 - correlation))


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0
