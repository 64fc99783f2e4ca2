"""Render single extracted pages to encoded bitmaps."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from common.imaging import image_to_bytes, quality_percent

from .backend import DocumentBackend, PageHandle


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else "png"

    @property
    def lossy(self) -> bool:
        return self is ImageFormat.JPEG

    @classmethod
    def parse(cls, value: "str | ImageFormat") -> "ImageFormat":
        if isinstance(value, ImageFormat):
            return value
        normalized = str(value).strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError as exc:
            raise RasterOptionsError("Output format must be jpeg or png") from exc


class RasterOptionsError(ValueError):
    code = "page_extract.invalid_options"


@dataclass(frozen=True, slots=True)
class RasterOptions:
    scale: float = 2.0
    quality: float = 0.8
    format: ImageFormat = ImageFormat.JPEG

    def __post_init__(self) -> None:
        if not isinstance(self.format, ImageFormat):
            object.__setattr__(self, "format", ImageFormat.parse(self.format))
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise RasterOptionsError("Scale must be greater than 0")
        if not math.isfinite(self.quality) or not 0.0 <= self.quality <= 1.0:
            raise RasterOptionsError("Quality must be between 0 and 1")


@dataclass(frozen=True, slots=True)
class PageArtifact:
    page_number: int
    source_page: int
    data: bytes
    mime_type: str
    width: int
    height: int

    @property
    def extension(self) -> str:
        return "png" if self.mime_type == ImageFormat.PNG.mime_type else "jpg"

    @property
    def filename(self) -> str:
        return f"page_{self.page_number}.{self.extension}"


class RenderError(RuntimeError):
    """A single page failed to render; sibling pages are unaffected."""

    code = "page_extract.render_failed"

    def __init__(self, page_number: int, reason: str) -> None:
        super().__init__(f"Error converting page {page_number}: {reason}")
        self.page_number = page_number
        self.reason = reason


def target_size(width: float, height: float, scale: float) -> tuple[int, int]:
    """Pixel size for a page of ``width`` x ``height`` points.

    Both axes are floored after scaling and never drop below one pixel.
    """

    return (
        max(1, math.floor(width * scale)),
        max(1, math.floor(height * scale)),
    )


def _fit(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    if image.size == size:
        return image
    if image.width >= size[0] and image.height >= size[1]:
        return image.crop((0, 0, size[0], size[1]))
    return image.resize(size, Image.Resampling.LANCZOS)


def rasterize_page(
    page: PageHandle,
    options: RasterOptions,
    *,
    backend: DocumentBackend,
) -> PageArtifact:
    """Render ``page`` and encode it according to ``options``."""

    try:
        width, height = backend.page_size(page)
        size = target_size(width, height, options.scale)
        image = _fit(backend.render(page, options.scale), size)
        quality = quality_percent(options.quality) if options.format.lossy else None
        data = image_to_bytes(image, options.format.value, quality=quality)
    except Exception as exc:
        raise RenderError(page.page_number, str(exc) or type(exc).__name__) from exc
    return PageArtifact(
        page_number=page.page_number,
        source_page=page.source_page,
        data=data,
        mime_type=options.format.mime_type,
        width=size[0],
        height=size[1],
    )


__all__ = [
    "ImageFormat",
    "RasterOptionsError",
    "RasterOptions",
    "PageArtifact",
    "RenderError",
    "target_size",
    "rasterize_page",
]
