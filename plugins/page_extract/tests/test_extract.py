from threading import Event

import pytest

from plugins.page_extract.core import (
    CodecError,
    ExtractionCancelled,
    PageRange,
    PdfBackend,
    count_selected_pages,
    extract_pages,
    parse_page_ranges,
)


def test_extract_preserves_order_and_duplicates(make_pdf, read_source_pages):
    backend = PdfBackend()
    document = backend.load(make_pdf(10))
    ranges = (PageRange(3, 3), PageRange(1, 2), PageRange(3, 3))

    output = extract_pages(document, ranges, backend=backend)

    assert output.page_count == 4
    assert output.source_pages == [3, 1, 2, 3]
    assert read_source_pages(backend.serialize(output)) == [3, 1, 2, 3]


def test_extract_page_count_matches_selection(make_pdf):
    backend = PdfBackend()
    document = backend.load(make_pdf(6))
    ranges = parse_page_ranges("2-4, 1-6, 5")

    output = extract_pages(document, ranges, backend=backend)

    assert output.page_count == count_selected_pages(ranges) == 10


def test_extract_does_not_touch_source_document(make_pdf):
    backend = PdfBackend()
    document = backend.load(make_pdf(3))

    extract_pages(document, (PageRange(2, 3),), backend=backend)

    assert document.page_count == 3
    assert len(document.handle.pages) == 3


def test_extract_stops_when_cancelled(make_pdf):
    backend = PdfBackend()
    document = backend.load(make_pdf(3))
    cancel = Event()
    cancel.set()

    with pytest.raises(ExtractionCancelled):
        extract_pages(document, (PageRange(1, 3),), backend=backend, cancel_event=cancel)


def test_backend_load_rejects_non_pdf_bytes():
    backend = PdfBackend()
    with pytest.raises(CodecError):
        backend.load(b"not really a pdf")
    with pytest.raises(CodecError):
        backend.load(b"")


def test_backend_copy_page_uses_zero_based_index(make_pdf):
    backend = PdfBackend()
    document = backend.load(make_pdf(2))
    output = backend.new_document()

    backend.copy_page(document, 1, output)

    assert output.source_pages == [2]
    with pytest.raises(IndexError):
        backend.copy_page(document, 2, output)
