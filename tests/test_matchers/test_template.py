"""Tests for Template."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest

from autodroid.core.exceptions import MatchError
from autodroid.core.models import Point
from autodroid.imaging.image import ImageBuffer
from autodroid.matchers.template import Template


def _noise(height: int = 120, width: int = 160, seed: int = 5) -> np.ndarray:
    rng = np.random.RandomState(seed)
    return rng.randint(0, 256, (height, width, 3), dtype=np.uint8)


@pytest.fixture()
def scene() -> ImageBuffer:
    return ImageBuffer.from_array(_noise())


class TestIdentity:
    def test_str(self, scene: ImageBuffer) -> None:
        tmpl = Template("main_menu", 0.05, scene)
        assert str(tmpl) == "Template(main_menu)"
        assert repr(tmpl) == "Template(main_menu)"

    def test_equality_by_name(self, scene: ImageBuffer) -> None:
        other = ImageBuffer.from_array(_noise(seed=9))
        assert Template("a", 0.05, scene) == Template("a", 0.2, other)
        assert Template("a", 0.05, scene) != Template("b", 0.05, scene)
        assert hash(Template("a", 0.05, scene)) == hash(Template("a", 0.1, other))

    def test_frozen(self, scene: ImageBuffer) -> None:
        tmpl = Template("a", 0.05, scene)
        with pytest.raises(AttributeError):
            tmpl.threshold = 0.5  # type: ignore[misc]


class TestAccepts:
    def test_inclusive_threshold(self, scene: ImageBuffer) -> None:
        tmpl = Template("a", 0.05, scene)
        assert tmpl.accepts(0.05) is True
        assert tmpl.accepts(0.0500001) is False

    def test_negative_threshold_never_matches(self, scene: ImageBuffer) -> None:
        tmpl = Template("never", -0.01, scene)
        assert tmpl.accepts(tmpl.diff(scene)) is False

    def test_failure_score_never_matches(self, scene: ImageBuffer) -> None:
        tmpl = Template("always", 1.0, scene)
        assert tmpl.accepts(0.99) is True
        assert tmpl.accepts(tmpl.diff(None)) is False
        assert tmpl.accepts(tmpl.find(None).difference) is False


class TestMatching:
    def test_diff_self(self, scene: ImageBuffer) -> None:
        assert Template("self", 0.05, scene).diff(scene) == pytest.approx(0.0, abs=1e-5)

    def test_diff_no_scene(self, scene: ImageBuffer) -> None:
        assert Template("self", 0.05, scene).diff(None) == 1.0

    def test_find(self, scene: ImageBuffer) -> None:
        patch = ImageBuffer.from_array(_noise()[10:30, 20:60])
        result = Template("patch", 0.05, patch).find(scene)
        assert result.location == Point(x=40, y=20)
        assert result.matches(0.05)

    def test_find_edge_with_colour_template(self) -> None:
        """Colour templates are edge-filtered like the scene."""
        arr = np.zeros((100, 140, 3), dtype=np.uint8)
        cv2.rectangle(arr, (50, 30), (90, 60), (255, 255, 255), 2)
        cv2.circle(arr, (70, 45), 8, (0, 200, 0), -1)
        scene = ImageBuffer.from_array(arr)
        tmpl = Template("box", 0.5, ImageBuffer.from_array(arr[20:70, 40:100]))
        result = tmpl.find_edge(scene)
        assert result.location is not None
        assert abs(result.location.x - 70) <= 2
        assert abs(result.location.y - 45) <= 2


class TestLoad:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "menu.png"
        cv2.imwrite(str(path), _noise(20, 30))
        tmpl = Template.load("menu", path, 0.03)
        assert tmpl.name == "menu"
        assert tmpl.threshold == 0.03
        assert tmpl.image.size.width == 30

    def test_load_missing(self, tmp_path: Path) -> None:
        with pytest.raises(MatchError):
            Template.load("menu", tmp_path / "missing.png", 0.03)
