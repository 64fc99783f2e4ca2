"""Validation primitives for plugin APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, TypeVar

import pydantic
from pydantic import BaseModel
from werkzeug.datastructures import FileStorage


class ValidationError(ValueError):
    """Raised when validation fails."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class SchemaModel(BaseModel):
    """Strict base model for request/response validation."""

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True)


TModel = TypeVar("TModel", bound=SchemaModel)


def parse_model(model: type[TModel], payload: Mapping[str, Any] | None) -> TModel:
    payload = payload or {}
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False)
        raise ValidationError("Invalid request payload", details=details) from exc


@dataclass(slots=True)
class FileLimit:
    max_files: int
    max_size: int

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any] | None,
        *,
        default_max_files: int,
        default_max_mb: int,
    ) -> "FileLimit":
        """Build a :class:`FileLimit` from the ``upload`` block of ``config.yml``.

        Missing or malformed values fall back to the supplied defaults so a
        misconfigured deployment never fails at request time.
        """

        max_files = default_max_files
        max_mb: float = default_max_mb

        if settings:
            try:
                max_files = int(settings.get("max_files", default_max_files))
            except (TypeError, ValueError):
                max_files = default_max_files

            try:
                max_mb = float(settings.get("max_mb", default_max_mb))
            except (TypeError, ValueError):
                max_mb = default_max_mb

        max_files = max(max_files, 1)
        max_mb = max(max_mb, 1)
        return cls(max_files=max_files, max_size=int(max_mb * 1024 * 1024))


def enforce_limits(files: Iterable[FileStorage], limit: FileLimit) -> None:
    files = list(files)
    if not files:
        raise ValidationError("At least one file is required")
    if len(files) > limit.max_files:
        raise ValidationError("Too many files uploaded")
    for file in files:
        file.seek(0, 2)
        size = file.tell()
        file.seek(0)
        if size > limit.max_size:
            raise ValidationError(
                "File exceeds allowed size",
                details={"size_bytes": size, "max_bytes": limit.max_size},
            )


_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "application/pdf": (b"%PDF-",),
    "image/png": (b"\x89PNG\r\n\x1a\n",),
    "image/jpeg": (b"\xff\xd8\xff",),
}


def _matches_signature(sample: bytes, allowed: set[str]) -> bool:
    for mime in allowed:
        signatures = _SIGNATURES.get(mime, ())
        if any(sample.startswith(signature) for signature in signatures):
            return True
    return False


def validate_mime(files: Iterable[FileStorage], allowed: set[str]) -> None:
    for file in files:
        stream = file.stream
        try:
            current = stream.tell()
        except (AttributeError, OSError):
            current = None

        try:
            stream.seek(0)
        except (AttributeError, OSError):
            pass

        sample = stream.read(1024)
        if isinstance(sample, str):
            sample = sample.encode("utf-8", "ignore")

        try:
            stream.seek(current or 0)
        except (AttributeError, OSError):
            pass

        if not _matches_signature(sample or b"", allowed):
            raise ValidationError("Unsupported or invalid file signature")


__all__ = [
    "ValidationError",
    "SchemaModel",
    "parse_model",
    "FileLimit",
    "enforce_limits",
    "validate_mime",
]
