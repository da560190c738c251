"""Template matching: correlation engine and named templates."""

from __future__ import annotations

from autodroid.matchers.engine import MAX_DIFFERENCE, locate, locate_edges, score
from autodroid.matchers.template import Template

__all__ = [
    "MAX_DIFFERENCE",
    "Template",
    "locate",
    "locate_edges",
    "score",
]
