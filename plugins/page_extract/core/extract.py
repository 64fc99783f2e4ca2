"""Build a new document holding exactly the selected pages."""

from __future__ import annotations

from threading import Event

from .backend import DocumentBackend, LoadedDocument, OutputDocument
from .page_ranges import RangeSet


class ExtractionCancelled(RuntimeError):
    """Raised when the owning run was discarded between page copies."""

    code = "page_extract.cancelled"


def extract_pages(
    document: LoadedDocument,
    ranges: RangeSet,
    *,
    backend: DocumentBackend,
    cancel_event: Event | None = None,
) -> OutputDocument:
    """Copy the pages named by ``ranges`` into a fresh document.

    Pages are appended in selection order; overlapping or repeated ranges
    yield repeated pages. ``ranges`` must already be validated against
    ``document``.
    """

    output = backend.new_document()
    for page_range in ranges:
        for page_number in page_range.pages():
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelled("Extraction cancelled")
            backend.copy_page(document, page_number - 1, output)
    return output


__all__ = ["ExtractionCancelled", "extract_pages"]
