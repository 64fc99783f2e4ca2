"""Run the extraction pipeline and sequence its outputs for delivery."""

from __future__ import annotations

import time
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from threading import Event
from typing import Callable, Iterable, Iterator

from common.logging import get_logger
from common.tasks import map_ordered

from .backend import CodecError, DocumentBackend, LoadedDocument, PageHandle, default_backend
from .extract import ExtractionCancelled, extract_pages
from .page_ranges import (
    EmptySelectionError,
    PageRangeError,
    RangeSet,
    count_selected_pages,
    resolve_selection,
    validate_page_ranges,
)
from .raster import PageArtifact, RasterOptions, RenderError, rasterize_page

logger = get_logger(__name__)

DEFAULT_PACING_DELAY = 0.1

PipelineError = PageRangeError | CodecError | ExtractionCancelled


class RunState(str, Enum):
    IDLE = "idle"
    PARSED = "parsed"
    VALIDATED = "validated"
    EXTRACTED = "extracted"
    RASTERIZING = "rasterizing"
    DONE = "done"
    PARSE_EMPTY = "parse_empty"
    VALIDATION_FAILED = "validation_failed"
    EXTRACTION_FAILED = "extraction_failed"
    CANCELLED = "cancelled"

    @property
    def failed(self) -> bool:
        return self in _FAILED_STATES


_FAILED_STATES = {
    RunState.PARSE_EMPTY,
    RunState.VALIDATION_FAILED,
    RunState.EXTRACTION_FAILED,
    RunState.CANCELLED,
}


@dataclass(frozen=True, slots=True)
class PageFailure:
    page_number: int
    source_page: int
    reason: str


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    state: RunState
    ranges: RangeSet = ()
    total_pages: int = 0
    pdf: bytes | None = None
    artifacts: tuple[PageArtifact, ...] = ()
    failures: tuple[PageFailure, ...] = ()
    error: PipelineError | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.state is RunState.DONE

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def partial(self) -> bool:
        return self.ok and self.failed_count > 0

    @property
    def summary(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.artifacts or self.failures:
            return f"Converted {len(self.artifacts)} of {self.total_pages} page(s)."
        return f"Extracted {self.total_pages} page(s) from {len(self.ranges)} range(s)."


def _failed(state: RunState, error: PipelineError, ranges: RangeSet = ()) -> ExtractionResult:
    return ExtractionResult(state=state, ranges=ranges, error=error)


def _render_one(
    page: PageHandle,
    options: RasterOptions,
    backend: DocumentBackend,
    cancel_event: Event | None,
) -> PageArtifact | PageFailure:
    if cancel_event is not None and cancel_event.is_set():
        raise ExtractionCancelled("Rasterization cancelled")
    try:
        return rasterize_page(page, options, backend=backend)
    except RenderError as exc:
        logger.warning("page %s (source page %s) failed to render: %s", page.page_number, page.source_page, exc.reason)
        return PageFailure(page_number=page.page_number, source_page=page.source_page, reason=exc.reason)


def rasterize_pages(
    pages: Iterable[PageHandle],
    options: RasterOptions,
    *,
    backend: DocumentBackend,
    workers: int = 1,
    cancel_event: Event | None = None,
) -> tuple[tuple[PageArtifact, ...], tuple[PageFailure, ...]]:
    """Render ``pages`` independently, keeping successes in page order."""

    if not backend.thread_safe:
        workers = 1
    outcomes = map_ordered(
        lambda page: _render_one(page, options, backend, cancel_event),
        pages,
        workers=workers,
    )
    artifacts = tuple(item for item in outcomes if isinstance(item, PageArtifact))
    failures = tuple(item for item in outcomes if isinstance(item, PageFailure))
    return artifacts, failures


def run_document(
    document: LoadedDocument | None,
    ranges: RangeSet,
    *,
    rasterize: bool = False,
    options: RasterOptions | None = None,
    backend: DocumentBackend | None = None,
    cancel_event: Event | None = None,
    workers: int = 1,
) -> ExtractionResult:
    """Validate, extract and optionally rasterize an already loaded document."""

    backend = backend or default_backend()
    total = document.page_count if document is not None else None
    try:
        validate_page_ranges(ranges, total)
    except EmptySelectionError as exc:
        return _failed(RunState.PARSE_EMPTY, exc, ranges)
    except PageRangeError as exc:
        return _failed(RunState.VALIDATION_FAILED, exc, ranges)

    try:
        output = extract_pages(document, ranges, backend=backend, cancel_event=cancel_event)
        selected = count_selected_pages(ranges)
        if not rasterize:
            pdf = backend.serialize(output)
            logger.info("extracted %s page(s) from %s range(s)", selected, len(ranges))
            return ExtractionResult(state=RunState.DONE, ranges=ranges, total_pages=selected, pdf=pdf)

        options = options or RasterOptions()
        artifacts, failures = rasterize_pages(
            backend.pages(output),
            options,
            backend=backend,
            workers=workers,
            cancel_event=cancel_event,
        )
    except ExtractionCancelled as exc:
        logger.info("run cancelled: %s", exc)
        return _failed(RunState.CANCELLED, exc, ranges)
    except CodecError as exc:
        logger.error("codec failure during extraction: %s", exc)
        return _failed(RunState.EXTRACTION_FAILED, exc, ranges)

    logger.info(
        "rasterized %s of %s page(s) as %s (scale=%s)",
        len(artifacts),
        selected,
        options.format.value,
        options.scale,
    )
    return ExtractionResult(
        state=RunState.DONE,
        ranges=ranges,
        total_pages=selected,
        artifacts=artifacts,
        failures=failures,
    )


def run_pipeline(
    data: bytes | None,
    range_text: str | None,
    *,
    rasterize: bool = False,
    options: RasterOptions | None = None,
    backend: DocumentBackend | None = None,
    cancel_event: Event | None = None,
    workers: int = 1,
) -> ExtractionResult:
    """Full run from raw bytes and a selection string.

    Input and codec errors come back in ``result.error``; they are never
    raised. Per-page render failures are listed in ``result.failures``.
    """

    backend = backend or default_backend()
    document: LoadedDocument | None = None
    if data is not None:
        try:
            document = backend.load(data)
        except CodecError as exc:
            logger.info("rejected source document: %s", exc)
            return _failed(RunState.EXTRACTION_FAILED, exc)
    ranges = resolve_selection(range_text, document.page_count if document else None)
    return run_document(
        document,
        ranges,
        rasterize=rasterize,
        options=options,
        backend=backend,
        cancel_event=cancel_event,
        workers=workers,
    )


def iter_paced(
    artifacts: Iterable[PageArtifact],
    delay: float = DEFAULT_PACING_DELAY,
    *,
    sleep: Callable[[float], None] | None = None,
    cancel_event: Event | None = None,
) -> Iterator[PageArtifact]:
    """Yield artifacts one at a time, at least ``delay`` seconds apart.

    Order is preserved. The first artifact is emitted immediately. Stops early
    when ``cancel_event`` is set.
    """

    sleep = sleep or time.sleep
    delay = max(0.0, float(delay))
    for index, artifact in enumerate(artifacts):
        if index and delay:
            sleep(delay)
        if cancel_event is not None and cancel_event.is_set():
            return
        yield artifact


def bundle_artifacts(artifacts: Iterable[PageArtifact]) -> bytes:
    """Pack artifacts into one ZIP archive, in order."""

    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for artifact in artifacts:
            zf.writestr(artifact.filename, artifact.data)
    return buffer.getvalue()


__all__ = [
    "DEFAULT_PACING_DELAY",
    "PipelineError",
    "RunState",
    "PageFailure",
    "ExtractionResult",
    "rasterize_pages",
    "run_document",
    "run_pipeline",
    "iter_paced",
    "bundle_artifacts",
]
