"""YAML template manifest loader — builds the startup template library.

Image paths are resolved against ``base_dir``, which is itself relative to
the manifest file's directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from autodroid.core.exceptions import MatchError, TemplateError
from autodroid.core.models import TemplateManifest
from autodroid.matchers.template import Template

logger = logging.getLogger(__name__)


class TemplateLibrary(Mapping[str, Template]):
    """Read-only name → Template mapping."""

    def __init__(self, templates: list[Template]) -> None:
        self._templates = {t.name: t for t in templates}

    def __getitem__(self, name: str) -> Template:
        try:
            return self._templates[name]
        except KeyError:
            msg = f"Unknown template: {name}"
            raise KeyError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def select(self, *names: str) -> list[Template]:
        """Templates for *names*, in the given (priority) order."""
        return [self[n] for n in names]


def load_templates(path: Path) -> TemplateLibrary:
    """Load every template declared in a manifest file.

    Raises:
        TemplateError: If the manifest cannot be read, parsed or validated,
            or if any referenced image cannot be loaded.
    """
    manifest = load_manifest(path)
    base_dir = (path.parent / manifest.base_dir).resolve()

    templates: list[Template] = []
    for entry in manifest.templates:
        threshold = (
            entry.threshold if entry.threshold is not None else manifest.default_threshold
        )
        image_path = base_dir / entry.image
        try:
            templates.append(Template.load(entry.name, image_path, threshold))
        except MatchError as e:
            msg = f"Template '{entry.name}' ({path.name}): {e}"
            raise TemplateError(msg) from e
        logger.debug("Loaded %s from %s (threshold=%.3f)", entry.name, image_path, threshold)

    return TemplateLibrary(templates)


def load_manifest(path: Path) -> TemplateManifest:
    """Parse and validate a manifest without touching the images."""
    data = _load_yaml(path)
    try:
        return TemplateManifest.model_validate(data)
    except Exception as e:
        msg = f"Template manifest validation failed ({path.name}): {e}"
        raise TemplateError(msg) from e


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:  # noqa: PTH123
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML: {path}: {e}"
        raise TemplateError(msg) from e
    except OSError as e:
        msg = f"Failed to read template manifest: {path}: {e}"
        raise TemplateError(msg) from e

    if not isinstance(data, dict):
        msg = f"Template manifest must be a YAML mapping, got {type(data).__name__}: {path}"
        raise TemplateError(msg)
    return data
