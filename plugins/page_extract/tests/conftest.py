from io import BytesIO

import pytest
from PyPDF2 import PdfReader, PdfWriter


def page_width(page_number: int) -> int:
    """Blank fixture pages are told apart by their width."""

    return 100 + 10 * page_number


def build_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for number in range(1, pages + 1):
        writer.add_blank_page(width=page_width(number), height=200)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def source_pages_of(data: bytes) -> list[int]:
    reader = PdfReader(BytesIO(data))
    return [(int(float(page.mediabox.width)) - 100) // 10 for page in reader.pages]


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def read_source_pages():
    return source_pages_of
