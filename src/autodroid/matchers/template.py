"""Template — a named reference image bound to a match threshold."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from autodroid.imaging.image import ImageBuffer
from autodroid.matchers import engine

if TYPE_CHECKING:
    from autodroid.core.models import MatchingConfig, MatchResult


@dataclass(frozen=True, eq=False)
class Template:
    """Reference image the automation reasons about.

    A scene matches when its difference against ``image`` is at most
    ``threshold``. A difference of ``MAX_DIFFERENCE`` (missing scene,
    matching failure) is never a match, whatever the threshold.
    Identity (equality, hashing) is by name.
    """

    name: str
    threshold: float
    image: ImageBuffer = field(repr=False)

    @classmethod
    def load(cls, name: str, path: str | Path, threshold: float) -> Template:
        return cls(name=name, threshold=threshold, image=ImageBuffer.load(path))

    def accepts(self, difference: float) -> bool:
        """Within threshold. The engine's failure score never passes."""
        return difference < engine.MAX_DIFFERENCE and difference <= self.threshold

    def diff(self, scene: ImageBuffer | None) -> float:
        return engine.score(scene, self.image)

    def find(self, scene: ImageBuffer | None) -> MatchResult:
        return engine.locate(scene, self.image)

    def find_edge(
        self,
        scene: ImageBuffer | None,
        config: MatchingConfig | None = None,
    ) -> MatchResult:
        return engine.locate_edges(scene, self.image, config)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Template):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return f"Template({self.name})"

    __repr__ = __str__
