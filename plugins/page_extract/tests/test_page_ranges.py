import pytest

from plugins.page_extract.core import (
    EmptyInputError,
    EmptySelectionError,
    PageRange,
    RangeOutOfBoundsError,
    count_selected_pages,
    describe_page_range,
    format_page_ranges,
    iter_selected_pages,
    parse_page_ranges,
    resolve_selection,
    validate_page_ranges,
)


def test_parse_drops_malformed_tokens_and_keeps_order():
    assert parse_page_ranges("1-3, abc, 5") == (PageRange(1, 3), PageRange(5, 5))


@pytest.mark.parametrize("text", ["5-2", "0-3", "-1", "0", "3-", "1-2-3", "1.5", "2-x", "+4"])
def test_parse_rejects_invalid_tokens(text):
    assert parse_page_ranges(text) == ()


def test_parse_ignores_whitespace_around_tokens_and_hyphen():
    assert parse_page_ranges("  7 ,1 -  2,\t4\t") == (
        PageRange(7, 7),
        PageRange(1, 2),
        PageRange(4, 4),
    )


@pytest.mark.parametrize("text", ["", "   ", None, ",,,"])
def test_parse_empty_input_yields_empty_set(text):
    assert parse_page_ranges(text) == ()


def test_parse_keeps_duplicates_and_overlaps_unsorted():
    ranges = parse_page_ranges("3, 1-2, 3, 2-4")
    assert ranges == (PageRange(3, 3), PageRange(1, 2), PageRange(3, 3), PageRange(2, 4))
    assert list(iter_selected_pages(ranges)) == [3, 1, 2, 3, 2, 3, 4]
    assert count_selected_pages(ranges) == 7


@pytest.mark.parametrize(
    "text",
    ["1-3, abc, 5", "10,9,8", " 2 - 6 ,0, 6-2, 12", "", "4-4", "1-1000, 1"],
)
def test_canonical_string_round_trips(text):
    parsed = parse_page_ranges(text)
    canonical = format_page_ranges(parsed)
    assert parse_page_ranges(canonical) == parsed
    assert format_page_ranges(parse_page_ranges(canonical)) == canonical


def test_format_writes_single_pages_without_hyphen():
    assert format_page_ranges([PageRange(1, 3), PageRange(5, 5)]) == "1-3, 5"


def test_describe_matches_preview_labels():
    assert describe_page_range(PageRange(5, 5)) == "Page 5"
    assert describe_page_range(PageRange(1, 3)) == "Pages 1-3"


def test_page_range_rejects_invalid_bounds():
    with pytest.raises(ValueError):
        PageRange(0, 2)
    with pytest.raises(ValueError):
        PageRange(4, 2)


def test_validate_reports_first_out_of_bounds_range():
    ranges = (PageRange(1, 5), PageRange(8, 12), PageRange(20, 30))
    with pytest.raises(RangeOutOfBoundsError) as info:
        validate_page_ranges(ranges, 10)
    assert info.value.page_range == PageRange(8, 12)
    assert info.value.total_pages == 10
    assert "12" in str(info.value)


def test_validate_accepts_ranges_within_document():
    validate_page_ranges((PageRange(1, 5), PageRange(6, 10)), 10)


def test_validate_requires_document_and_selection():
    with pytest.raises(EmptyInputError):
        validate_page_ranges((PageRange(1, 1),), None)
    with pytest.raises(EmptySelectionError):
        validate_page_ranges((), 10)


def test_validation_errors_carry_stable_codes():
    assert EmptyInputError().code == "page_extract.empty_input"
    assert EmptySelectionError().code == "page_extract.empty_selection"
    assert RangeOutOfBoundsError(PageRange(2, 9), 3).code == "page_extract.page_out_of_range"


def test_resolve_selection_expands_all_keyword():
    assert resolve_selection("ALL", 4) == (PageRange(1, 4),)
    assert resolve_selection("all", None) == ()
    assert resolve_selection("2, 1", 4) == (PageRange(2, 2), PageRange(1, 1))
