"""Page extraction API blueprint with standardized responses."""

from __future__ import annotations

import base64
from typing import Any, Iterator, Literal

from flask import Blueprint, Response, current_app, request, send_file
from pydantic import Field

from common.errors import AppError, InternalAppError, ValidationAppError, ensure_app_error
from common.forms import get_bool, get_str
from common.io import buffer_from_bytes, file_stem, secure_filename, with_extension
from common.logging import get_logger
from common.responses import fail, ndjson, ok
from common.validation import (
    FileLimit,
    SchemaModel,
    ValidationError,
    enforce_limits,
    parse_model,
    validate_mime,
)

from ..core import (
    CodecError,
    ExtractionCancelled,
    ExtractionResult,
    PageArtifact,
    PageExtractSettings,
    PageRangeError,
    RangeOutOfBoundsError,
    RasterOptions,
    RasterOptionsError,
    SerializeError,
    bundle_artifacts,
    count_selected_pages,
    describe_page_range,
    format_page_ranges,
    iter_paced,
    load_settings,
    pdf_metadata,
    resolve_selection,
    run_pipeline,
    validate_page_ranges,
)

logger = get_logger(__name__)


class RangePreviewRequest(SchemaModel):
    pages: str = ""
    total_pages: int | None = Field(default=None, ge=0)


class ExtractRequest(SchemaModel):
    pages: str = ""
    output_name: str | None = None


class RasterizeRequest(SchemaModel):
    pages: str = "all"
    scale: float | None = Field(default=None, gt=0)
    quality: float | None = Field(default=None, ge=0, le=1)
    format: Literal["jpeg", "jpg", "png"] | None = None
    delivery: Literal["json", "bundle", "stream"] = "json"


api_bp = Blueprint("page_extract_api", __name__, url_prefix="/api/page_extract")


def _settings() -> PageExtractSettings:
    settings = current_app.config.get("PLUGIN_SETTINGS", {}).get("page_extract", {})
    return load_settings(settings)


def _upload_limit(settings: PageExtractSettings) -> FileLimit:
    return FileLimit.from_settings(
        {"max_files": settings.max_files, "max_mb": settings.max_upload_mb},
        default_max_files=1,
        default_max_mb=25,
    )


def _download_requested() -> bool:
    return get_bool(request.args, "download")


def _form_payload(keys: tuple[str, ...]) -> dict[str, Any]:
    source = request.form if request.form else (request.get_json(silent=True) or {})
    payload: dict[str, Any] = {}
    for key in keys:
        value = source.get(key)
        if value is not None and value != "":
            payload[key] = value
    return payload


def _parse_request(model, keys: tuple[str, ...], code: str, *, query: tuple[str, ...] = ()):
    payload = _form_payload(keys)
    for key in query:
        value = get_str(request.args, key)
        if value:
            payload[key] = value
    try:
        return parse_model(model, payload)
    except ValidationError as exc:
        raise ValidationAppError(
            message=str(exc), code=code, details={"errors": getattr(exc, "details", None)}
        ) from exc


def _read_upload(settings: PageExtractSettings) -> tuple[bytes, str]:
    file = request.files.get("file")
    if not file:
        raise ValidationAppError(message="No file provided", code="page_extract.file_missing")
    try:
        enforce_limits([file], _upload_limit(settings))
        validate_mime([file], {"application/pdf"})
    except ValidationError as exc:
        raise ValidationAppError(
            message=str(exc),
            code="page_extract.invalid_upload",
            details=getattr(exc, "details", None),
        ) from exc
    return file.read(), file.filename or "document.pdf"


def _pipeline_error(error: Exception) -> AppError:
    if isinstance(error, RangeOutOfBoundsError):
        return ValidationAppError(
            message=str(error),
            code=error.code,
            details={"range": str(error.page_range), "total_pages": error.total_pages},
        )
    if isinstance(error, (PageRangeError, RasterOptionsError)):
        return ValidationAppError(message=str(error), code=error.code)
    if isinstance(error, SerializeError):
        return InternalAppError(message="Failed to write the extracted PDF.", code=error.code)
    if isinstance(error, CodecError):
        return ValidationAppError(
            message="Failed to load PDF file. Please try again.",
            code=error.code,
            details={"error": str(error)},
        )
    if isinstance(error, ExtractionCancelled):
        return AppError(message=str(error), code=error.code, status_code=409)
    return ensure_app_error(error, fallback_code="page_extract.internal_error")


def _artifact_payload(artifact: PageArtifact) -> dict[str, Any]:
    return {
        "page_number": artifact.page_number,
        "source_page": artifact.source_page,
        "filename": artifact.filename,
        "mime_type": artifact.mime_type,
        "width": artifact.width,
        "height": artifact.height,
        "image_base64": base64.b64encode(artifact.data).decode("ascii"),
    }


def _raster_summary(result: ExtractionResult) -> dict[str, Any]:
    return {
        "converted": len(result.artifacts),
        "failed": result.failed_count,
        "total": result.total_pages,
        "message": result.summary,
        "failures": [
            {"page_number": item.page_number, "source_page": item.source_page, "reason": item.reason}
            for item in result.failures
        ],
    }


@api_bp.post("/metadata")
def metadata() -> Response:
    try:
        data, _ = _read_upload(_settings())
        info = pdf_metadata(data)
    except AppError as exc:
        return fail(exc)
    except CodecError as exc:
        return fail(_pipeline_error(exc))
    return ok({"pages": info.page_count, "size_bytes": info.size_bytes})


@api_bp.post("/ranges")
def ranges() -> Response:
    try:
        payload = _parse_request(
            RangePreviewRequest, ("pages", "total_pages"), "page_extract.invalid_request"
        )
    except AppError as exc:
        return fail(exc)

    parsed = resolve_selection(payload.pages, payload.total_pages)
    preview: dict[str, Any] = {
        "ranges": [{"start": item.start, "end": item.end} for item in parsed],
        "labels": [describe_page_range(item) for item in parsed],
        "canonical": format_page_ranges(parsed),
        "selected_pages": count_selected_pages(parsed),
        "valid": None,
        "error": None,
    }
    if payload.total_pages is not None:
        try:
            validate_page_ranges(parsed, payload.total_pages)
            preview["valid"] = True
        except PageRangeError as exc:
            preview["valid"] = False
            preview["error"] = _pipeline_error(exc).to_dict()
    return ok(preview)


@api_bp.post("/extract")
def extract() -> Response:
    settings = _settings()
    try:
        payload = _parse_request(
            ExtractRequest, ("pages", "output_name"), "page_extract.invalid_request"
        )
        data, filename = _read_upload(settings)
    except AppError as exc:
        return fail(exc)

    result = run_pipeline(data, payload.pages)
    if result.error is not None:
        return fail(_pipeline_error(result.error))

    output_name = payload.output_name or f"split_{file_stem(filename)}.pdf"
    safe_name = with_extension(secure_filename(output_name, fallback="split"), "pdf")

    if _download_requested():
        return send_file(
            buffer_from_bytes(result.pdf or b""),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=safe_name,
            max_age=0,
        )
    return ok(
        {
            "filename": safe_name,
            "pdf_base64": base64.b64encode(result.pdf or b"").decode("ascii"),
            "page_count": result.total_pages,
            "ranges": format_page_ranges(result.ranges),
            "message": result.summary,
        }
    )


def _raster_options(payload: RasterizeRequest, settings: PageExtractSettings) -> RasterOptions:
    scale = payload.scale if payload.scale is not None else settings.default_scale
    if scale > settings.max_scale:
        raise ValidationAppError(
            message=f"Scale must be ≤ {settings.max_scale}", code=RasterOptionsError.code
        )
    try:
        return RasterOptions(
            scale=scale,
            quality=payload.quality if payload.quality is not None else settings.default_quality,
            format=payload.format or settings.default_format,
        )
    except RasterOptionsError as exc:
        raise ValidationAppError(message=str(exc), code=exc.code) from exc


def _stream_records(result: ExtractionResult, delay: float) -> Iterator[dict[str, Any]]:
    yield {"type": "start", **_raster_summary(result)}
    for artifact in iter_paced(result.artifacts, delay):
        yield {"type": "page", **_artifact_payload(artifact)}
    yield {"type": "end", "message": result.summary}


@api_bp.post("/rasterize")
def rasterize() -> Response:
    settings = _settings()
    try:
        payload = _parse_request(
            RasterizeRequest,
            ("pages", "scale", "quality", "format", "delivery"),
            "page_extract.invalid_request",
            query=("delivery",),
        )
        options = _raster_options(payload, settings)
        data, _ = _read_upload(settings)
    except AppError as exc:
        return fail(exc)

    delivery = payload.delivery
    if _download_requested():
        delivery = "bundle"

    result = run_pipeline(
        data,
        payload.pages,
        rasterize=True,
        options=options,
        workers=settings.render_workers,
    )
    if result.error is not None:
        return fail(_pipeline_error(result.error))
    if result.partial:
        logger.warning(result.summary)

    if delivery == "bundle":
        return send_file(
            buffer_from_bytes(bundle_artifacts(result.artifacts)),
            mimetype="application/zip",
            as_attachment=True,
            download_name="pages.zip",
            max_age=0,
        )
    if delivery == "stream":
        return ndjson(_stream_records(result, settings.pacing_delay))

    response = _raster_summary(result)
    response["pages"] = [_artifact_payload(artifact) for artifact in result.artifacts]
    return ok(response)


blueprints = [api_bp]


__all__ = ["blueprints", "metadata", "ranges", "extract", "rasterize"]
