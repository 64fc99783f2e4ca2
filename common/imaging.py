"""Shared imaging helpers."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

_LOSSY_FORMATS = {"JPEG", "WEBP"}


def image_to_bytes(image: Image.Image, format: str = "PNG", *, quality: int | None = None) -> bytes:
    """Encode ``image`` with Pillow.

    ``quality`` is only forwarded to lossy encoders; lossless formats ignore it.
    JPEG output is flattened to RGB since the encoder rejects alpha channels.
    """

    format = format.upper()
    options: dict[str, object] = {}
    if format in _LOSSY_FORMATS:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        if quality is not None:
            options["quality"] = max(1, min(100, int(quality)))
    else:
        options["optimize"] = False
    buf = BytesIO()
    image.save(buf, format=format, **options)
    return buf.getvalue()


def quality_percent(quality: float) -> int:
    """Map a ``0..1`` quality fraction onto Pillow's ``1..100`` scale."""

    return max(1, min(100, int(round(quality * 100))))


__all__ = ["image_to_bytes", "quality_percent"]
