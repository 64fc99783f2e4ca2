"""Stateful front-end helper owning one loaded document at a time."""

from __future__ import annotations

from threading import Event, Lock

from .backend import DocumentBackend, LoadedDocument, default_backend
from .page_ranges import RangeSet, resolve_selection
from .raster import RasterOptions
from .sequencer import ExtractionResult, run_document


class ExtractionSession:
    """Hold the current document and selection for an interactive caller.

    Loading a new document, clearing, or starting a new run sets the cancel
    event of the run in flight, so a stale run stops at its next page and its
    partial output is dropped.
    """

    def __init__(self, backend: DocumentBackend | None = None, *, workers: int = 1):
        self.backend = backend or default_backend()
        self.workers = workers
        self._lock = Lock()
        self._document: LoadedDocument | None = None
        self._range_text = ""
        self._ranges: RangeSet = ()
        self._cancel = Event()

    @property
    def document(self) -> LoadedDocument | None:
        return self._document

    @property
    def total_pages(self) -> int | None:
        return self._document.page_count if self._document is not None else None

    @property
    def range_text(self) -> str:
        return self._range_text

    @property
    def ranges(self) -> RangeSet:
        return self._ranges

    def _restart(self) -> Event:
        self._cancel.set()
        self._cancel = Event()
        return self._cancel

    def load(self, data: bytes) -> LoadedDocument:
        """Replace the current document. Codec errors leave prior state intact."""

        document = self.backend.load(data)
        with self._lock:
            self._restart()
            self._document = document
            self._range_text = ""
            self._ranges = ()
        return document

    def set_ranges(self, text: str) -> RangeSet:
        """Re-parse the selection from scratch and return the valid subset."""

        with self._lock:
            self._range_text = text
            self._ranges = resolve_selection(text, self.total_pages)
            return self._ranges

    def clear(self) -> None:
        with self._lock:
            self._restart()
            self._document = None
            self._range_text = ""
            self._ranges = ()

    def run(self, *, rasterize: bool = False, options: RasterOptions | None = None) -> ExtractionResult:
        with self._lock:
            cancel_event = self._restart()
            document = self._document
            ranges = self._ranges
        return run_document(
            document,
            ranges,
            rasterize=rasterize,
            options=options,
            backend=self.backend,
            cancel_event=cancel_event,
            workers=self.workers,
        )


__all__ = ["ExtractionSession"]
