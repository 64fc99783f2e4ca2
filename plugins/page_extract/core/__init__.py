"""Facade for the page extraction pipeline."""

from __future__ import annotations

from .backend import (
    CodecError,
    DocumentBackend,
    LoadedDocument,
    OutputDocument,
    PageHandle,
    PdfBackend,
    SerializeError,
    default_backend,
)
from .extract import ExtractionCancelled, extract_pages
from .page_ranges import (
    ALL_PAGES,
    EmptyInputError,
    EmptySelectionError,
    PageRange,
    PageRangeError,
    RangeOutOfBoundsError,
    RangeSet,
    count_selected_pages,
    describe_page_range,
    format_page_ranges,
    iter_selected_pages,
    parse_page_ranges,
    resolve_selection,
    validate_page_ranges,
)
from .raster import (
    ImageFormat,
    PageArtifact,
    RasterOptions,
    RasterOptionsError,
    RenderError,
    rasterize_page,
    target_size,
)
from .sequencer import (
    DEFAULT_PACING_DELAY,
    ExtractionResult,
    PageFailure,
    RunState,
    bundle_artifacts,
    iter_paced,
    rasterize_pages,
    run_document,
    run_pipeline,
)
from .session import ExtractionSession
from .settings import PageExtractSettings, load_settings


def pdf_metadata(data: bytes, *, backend: DocumentBackend | None = None) -> LoadedDocument:
    """Load ``data`` just far enough to report its page count and size."""

    return (backend or default_backend()).load(data)


__all__ = [
    "ALL_PAGES",
    "CodecError",
    "DEFAULT_PACING_DELAY",
    "DocumentBackend",
    "EmptyInputError",
    "EmptySelectionError",
    "ExtractionCancelled",
    "ExtractionResult",
    "ExtractionSession",
    "ImageFormat",
    "LoadedDocument",
    "OutputDocument",
    "PageArtifact",
    "PageExtractSettings",
    "PageFailure",
    "PageHandle",
    "PageRange",
    "PageRangeError",
    "PdfBackend",
    "RangeOutOfBoundsError",
    "RangeSet",
    "RasterOptions",
    "RasterOptionsError",
    "RenderError",
    "RunState",
    "SerializeError",
    "bundle_artifacts",
    "count_selected_pages",
    "default_backend",
    "describe_page_range",
    "extract_pages",
    "format_page_ranges",
    "iter_paced",
    "iter_selected_pages",
    "load_settings",
    "parse_page_ranges",
    "pdf_metadata",
    "rasterize_page",
    "rasterize_pages",
    "resolve_selection",
    "run_document",
    "run_pipeline",
    "target_size",
    "validate_page_ranges",
]
