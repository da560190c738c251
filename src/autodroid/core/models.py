"""autodroid data models — Pydantic v2.

This module is a leaf: no internal project imports.
Geometry, result, config and manifest models live here.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# ============================================================
# Enums
# ============================================================


class WaitStatus(StrEnum):
    """Terminal state of a visual-wait operation."""

    MATCHED = "matched"
    ENDED = "ended"
    TIMED_OUT = "timed_out"
    ASSERTION_FAILED = "assertion_failed"


# ============================================================
# Geometry
# ============================================================


class Point(BaseModel):
    """Screen coordinate in device pixels."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Point:
        return Point(x=self.x + dx, y=self.y + dy)


class Size(BaseModel):
    """Width/height pair (pixels or cells)."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int


class Rect(BaseModel):
    """Axis-aligned box: top-left corner plus size."""

    model_config = ConfigDict(frozen=True)

    pos: Point
    size: Size

    def center(self) -> Point:
        return Point(
            x=self.pos.x + self.size.width // 2,
            y=self.pos.y + self.size.height // 2,
        )


# ============================================================
# Result Models
# ============================================================


class MatchResult(BaseModel):
    """Template matching result.

    ``difference`` is ``1 - normalized correlation``: 0.0 is a perfect match,
    1.0 is a guaranteed non-match. ``location`` is the center of the best
    match box and is only set for positional searches.
    """

    difference: float = Field(default=1.0, ge=0.0, le=1.0)
    location: Point | None = Field(default=None)
    elapsed_ms: float = Field(default=0.0, ge=0.0)

    @property
    def confidence(self) -> float:
        return 1.0 - self.difference

    def matches(self, threshold: float) -> bool:
        """Whether the difference is within *threshold*."""
        return self.difference <= threshold


# ============================================================
# Config Models
# ============================================================


class DeviceConfig(BaseModel):
    """ADB device transport configuration."""

    adb_path: str = Field(default="adb", description="adb executable")
    serial: str | None = Field(default=None, description="Device serial (adb -s)")
    command_timeout_s: float = Field(default=15.0, gt=0.0, le=300.0)
    drag_duration_ms: int = Field(default=500, ge=1, le=10000)


class WaitConfig(BaseModel):
    """Visual-wait polling configuration."""

    default_timeout_ms: int = Field(default=60000, ge=0)
    short_interval_s: float = Field(default=1.0, ge=0.0)
    long_interval_s: float = Field(default=5.0, ge=0.0)
    long_timeout_after_ms: int = Field(
        default=60000,
        ge=0,
        description="Timeouts above this use long_interval_s",
    )


class MatchingConfig(BaseModel):
    """Image matching configuration."""

    edge_blur_radius: float = Field(default=1.0, ge=0.0)
    canny_low: float = Field(default=255.0 / 3, ge=0.0, le=255.0)
    canny_high: float = Field(default=255.0, ge=0.0, le=255.0)
    default_threshold: float = Field(default=0.05, le=1.0)


class Config(BaseSettings):
    """Project configuration. Merged from YAML + env var + CLI flag."""

    model_config = SettingsConfigDict(
        env_prefix="AUTODROID_",
        env_nested_delimiter="__",
    )

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    wait: WaitConfig = Field(default_factory=WaitConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    templates_file: str = Field(default="templates.yaml")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Env vars are layered between YAML and CLI overrides by load_config.
        return (init_settings,)


# ============================================================
# Template Manifest Models
# ============================================================


class TemplateEntry(BaseModel):
    """Single template declaration in a manifest."""

    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1, description="Image path relative to base_dir")
    threshold: float | None = Field(default=None, le=1.0)


class TemplateManifest(BaseModel):
    """Template manifest file: a list of named reference images."""

    base_dir: str = Field(default=".")
    default_threshold: float = Field(default=0.05, le=1.0)
    templates: list[TemplateEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_names(self) -> TemplateManifest:
        seen: set[str] = set()
        for entry in self.templates:
            if entry.name in seen:
                msg = f"Duplicate template name: {entry.name}"
                raise ValueError(msg)
            seen.add(entry.name)
        return self
