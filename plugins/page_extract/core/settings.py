"""Configuration helpers for page extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .raster import ImageFormat, RasterOptions, RasterOptionsError


@dataclass(frozen=True)
class PageExtractSettings:
    max_files: int
    max_upload_mb: float
    default_scale: float
    default_quality: float
    default_format: ImageFormat
    max_scale: float
    pacing_delay_ms: int
    render_workers: int

    @property
    def pacing_delay(self) -> float:
        return self.pacing_delay_ms / 1000.0

    def default_options(self) -> RasterOptions:
        return RasterOptions(
            scale=self.default_scale,
            quality=self.default_quality,
            format=self.default_format,
        )


def _number(raw: Mapping[str, Any], key: str, default: float) -> float:
    try:
        return float(raw.get(key, default))
    except (TypeError, ValueError):
        return default


def load_settings(raw: Mapping[str, Any] | None) -> PageExtractSettings:
    """Build settings from the ``plugins.page_extract`` block of ``config.yml``.

    Malformed values fall back to defaults instead of raising.
    """

    raw = raw or {}
    upload = raw.get("upload")
    upload = upload if isinstance(upload, Mapping) else {}

    max_files = max(1, int(_number(upload, "max_files", 1)))
    max_upload_mb = max(1.0, _number(upload, "max_mb", 25))

    max_scale = _number(raw, "max_scale", 4.0)
    if max_scale <= 0:
        max_scale = 4.0
    default_scale = _number(raw, "default_scale", 2.0)
    if not 0 < default_scale <= max_scale:
        default_scale = min(2.0, max_scale)
    default_quality = _number(raw, "default_quality", 0.8)
    if not 0.0 <= default_quality <= 1.0:
        default_quality = 0.8
    try:
        default_format = ImageFormat.parse(raw.get("default_format", ImageFormat.JPEG))
    except RasterOptionsError:
        default_format = ImageFormat.JPEG

    pacing_delay_ms = max(0, int(_number(raw, "pacing_delay_ms", 100)))
    render_workers = max(1, int(_number(raw, "render_workers", 1)))

    return PageExtractSettings(
        max_files=max_files,
        max_upload_mb=max_upload_mb,
        default_scale=default_scale,
        default_quality=default_quality,
        default_format=default_format,
        max_scale=max_scale,
        pacing_delay_ms=pacing_delay_ms,
        render_workers=render_workers,
    )


__all__ = ["PageExtractSettings", "load_settings"]
