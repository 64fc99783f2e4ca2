"""In-memory IO helpers for uploads and downloads."""

from __future__ import annotations

import os
from io import BytesIO

SAFE_FILENAME_CHARS = {"-", "_", "."}


def buffer_from_bytes(data: bytes) -> BytesIO:
    buffer = BytesIO()
    buffer.write(data)
    buffer.seek(0)
    return buffer


def secure_filename(filename: str | None, *, fallback: str = "upload") -> str:
    """Sanitize filenames without relying on Werkzeug internals."""

    if not filename:
        return fallback
    filename = filename.replace("\\", "/").split("/")[-1]
    name, ext = os.path.splitext(filename)
    safe_name = "".join(
        ch if ch.isalnum() or ch in SAFE_FILENAME_CHARS else "_" for ch in name
    )
    safe_ext = "".join(ch for ch in ext if ch.isalnum() or ch in SAFE_FILENAME_CHARS)
    safe_name = safe_name.strip("._") or fallback
    safe_ext = safe_ext.strip("._")
    return f"{safe_name}{f'.{safe_ext}' if safe_ext else ''}"


def with_extension(filename: str, extension: str) -> str:
    """Return ``filename`` guaranteed to end with ``.extension``."""

    suffix = f".{extension.lstrip('.').lower()}"
    if filename.lower().endswith(suffix):
        return filename
    return f"{filename}{suffix}"


def file_stem(filename: str | None, *, fallback: str = "document") -> str:
    safe = secure_filename(filename, fallback=fallback)
    stem, _ = os.path.splitext(safe)
    return stem or fallback


__all__ = ["buffer_from_bytes", "secure_filename", "with_extension", "file_stem"]
