import pytest

from plugins.page_extract.core import (
    CodecError,
    EmptyInputError,
    ExtractionSession,
    PageRange,
    RunState,
)


def test_session_reparses_selection_from_scratch(make_pdf):
    session = ExtractionSession()
    session.load(make_pdf(5))

    assert session.set_ranges("1-2, x") == (PageRange(1, 2),)
    assert session.set_ranges("4") == (PageRange(4, 4),)
    assert session.set_ranges("all") == (PageRange(1, 5),)
    assert session.range_text == "all"


def test_session_run_extracts_current_selection(make_pdf, read_source_pages):
    session = ExtractionSession()
    session.load(make_pdf(5))
    session.set_ranges("5, 1")

    result = session.run()

    assert result.state is RunState.DONE
    assert read_source_pages(result.pdf) == [5, 1]


def test_clear_releases_document(make_pdf):
    session = ExtractionSession()
    session.load(make_pdf(2))
    session.set_ranges("1")

    session.clear()
    result = session.run()

    assert session.document is None
    assert session.ranges == ()
    assert isinstance(result.error, EmptyInputError)


def test_failed_load_keeps_previous_document(make_pdf):
    session = ExtractionSession()
    session.load(make_pdf(3))

    with pytest.raises(CodecError):
        session.load(b"garbage")

    assert session.total_pages == 3


def test_new_load_cancels_previous_run_token(make_pdf):
    session = ExtractionSession()
    session.load(make_pdf(2))
    previous = session._cancel

    session.load(make_pdf(4))

    assert previous.is_set()
    assert not session._cancel.is_set()
    assert session.ranges == ()
