"""Page range grammar, canonical formatting and validation.

A selection string is a comma separated list of tokens, each either a single
page (``"5"``) or an inclusive pair (``"1-10"``). Parsing is lenient: tokens
that do not form a valid range are dropped and the rest are kept in the order
they were typed, so a partially typed selection still previews its valid part.
Validation against a loaded document is strict and all-or-nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

_SINGLE_RE = re.compile(r"^\d+$", re.ASCII)
_PAIR_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$", re.ASCII)

ALL_PAGES = "all"


@dataclass(frozen=True, slots=True)
class PageRange:
    """Inclusive, 1-indexed page interval."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < 1:
            raise ValueError("Page numbers must be >= 1")
        if self.start > self.end:
            raise ValueError("Range start must be <= end")

    @property
    def page_count(self) -> int:
        return self.end - self.start + 1

    def pages(self) -> range:
        return range(self.start, self.end + 1)

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


RangeSet = tuple[PageRange, ...]


class PageRangeError(ValueError):
    """Raised when a parsed selection cannot be applied to a document."""

    code = "page_extract.invalid_page_range"


class EmptyInputError(PageRangeError):
    code = "page_extract.empty_input"

    def __init__(self) -> None:
        super().__init__("Please upload a PDF file first.")


class EmptySelectionError(PageRangeError):
    code = "page_extract.empty_selection"

    def __init__(self) -> None:
        super().__init__("Invalid page range format. Use format like: 1-3, 4, 6-8")


class RangeOutOfBoundsError(PageRangeError):
    code = "page_extract.page_out_of_range"

    def __init__(self, page_range: PageRange, total_pages: int) -> None:
        super().__init__(f"Page {page_range.end} exceeds total pages ({total_pages}).")
        self.page_range = page_range
        self.total_pages = total_pages


def _parse_token(token: str) -> PageRange | None:
    token = token.strip()
    if _SINGLE_RE.match(token):
        page = int(token)
        return PageRange(page, page) if page > 0 else None
    match = _PAIR_RE.match(token)
    if match is None:
        return None
    start, end = int(match.group(1)), int(match.group(2))
    if start <= 0 or end <= 0 or start > end:
        return None
    return PageRange(start, end)


def parse_page_ranges(text: str | None) -> RangeSet:
    """Parse ``text`` into page ranges, dropping malformed tokens.

    Never raises. Order is preserved and nothing is sorted or deduplicated.
    """

    if not text or not text.strip():
        return ()
    parsed: list[PageRange] = []
    for token in text.split(","):
        page_range = _parse_token(token)
        if page_range is not None:
            parsed.append(page_range)
    return tuple(parsed)


def format_page_ranges(ranges: Iterable[PageRange]) -> str:
    """Return the canonical selection string for ``ranges``."""

    return ", ".join(str(page_range) for page_range in ranges)


def describe_page_range(page_range: PageRange) -> str:
    if page_range.start == page_range.end:
        return f"Page {page_range.start}"
    return f"Pages {page_range.start}-{page_range.end}"


def count_selected_pages(ranges: Iterable[PageRange]) -> int:
    return sum(page_range.page_count for page_range in ranges)


def iter_selected_pages(ranges: Iterable[PageRange]) -> Iterable[int]:
    """Yield 1-indexed page numbers in visitation order, repeats included."""

    for page_range in ranges:
        yield from page_range.pages()


def validate_page_ranges(ranges: RangeSet, total_pages: int | None) -> None:
    """Check ``ranges`` against a document of ``total_pages`` pages.

    ``total_pages`` is ``None`` when no document is loaded. Raises on the first
    offending range in selection order.
    """

    if total_pages is None:
        raise EmptyInputError()
    if not ranges:
        raise EmptySelectionError()
    for page_range in ranges:
        if page_range.end > total_pages:
            raise RangeOutOfBoundsError(page_range, total_pages)


def resolve_selection(text: str | None, total_pages: int | None) -> RangeSet:
    """Parse ``text``, expanding the ``all`` keyword when a document is loaded."""

    if text is not None and text.strip().lower() == ALL_PAGES:
        if total_pages:
            return (PageRange(1, total_pages),)
        return ()
    return parse_page_ranges(text)


__all__ = [
    "ALL_PAGES",
    "PageRange",
    "RangeSet",
    "PageRangeError",
    "EmptyInputError",
    "EmptySelectionError",
    "RangeOutOfBoundsError",
    "parse_page_ranges",
    "format_page_ranges",
    "describe_page_range",
    "count_selected_pages",
    "iter_selected_pages",
    "validate_page_ranges",
    "resolve_selection",
]
