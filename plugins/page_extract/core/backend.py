"""Document container capability interface and the PDF implementation.

The pipeline only talks to :class:`DocumentBackend`. :class:`PdfBackend`
fulfils it with PyPDF2 for loading, page copies and serialization, and with
pypdfium2 for rendering pages to bitmaps.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any

import pypdfium2 as pdfium
from PIL import Image
from PyPDF2 import PdfReader, PdfWriter


class CodecError(RuntimeError):
    """Raised when the codec cannot read or write a document."""

    code = "page_extract.invalid_pdf"


class SerializeError(CodecError):
    code = "page_extract.serialize_failed"


@dataclass(slots=True)
class LoadedDocument:
    """A parsed source document. Read-only for the pipeline."""

    handle: Any
    page_count: int
    size_bytes: int


@dataclass(slots=True)
class OutputDocument:
    """A document under construction.

    ``source_pages`` records, per output position, the 1-indexed source page
    it was copied from.
    """

    handle: Any
    source_pages: list[int] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.source_pages)


@dataclass(frozen=True, slots=True)
class PageHandle:
    page_number: int  # 1-indexed position in the output document
    source_page: int  # 1-indexed page of the source document
    page: Any


class DocumentBackend(ABC):
    """Narrow capability set the pipeline needs from a document codec."""

    #: Whether :meth:`render` may be called from several threads at once.
    thread_safe: bool = False

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def load(self, data: bytes) -> LoadedDocument:
        raise NotImplementedError

    def page_count(self, document: LoadedDocument | OutputDocument) -> int:
        return document.page_count

    @abstractmethod
    def new_document(self) -> OutputDocument:
        raise NotImplementedError

    @abstractmethod
    def copy_page(self, source: LoadedDocument, index: int, target: OutputDocument) -> None:
        """Append 0-indexed page ``index`` of ``source`` to ``target``."""

        raise NotImplementedError

    @abstractmethod
    def pages(self, document: OutputDocument) -> list[PageHandle]:
        raise NotImplementedError

    @abstractmethod
    def serialize(self, document: OutputDocument) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def page_size(self, page: PageHandle) -> tuple[float, float]:
        """Return the displayed ``(width, height)`` of ``page`` in points."""

        raise NotImplementedError

    @abstractmethod
    def render(self, page: PageHandle, scale: float) -> Image.Image:
        raise NotImplementedError


class PdfBackend(DocumentBackend):
    def backend_id(self) -> str:
        return "pypdf2+pypdfium2"

    def load(self, data: bytes) -> LoadedDocument:
        if not data:
            raise CodecError("Failed to load PDF file: the upload is empty.")
        try:
            reader = PdfReader(BytesIO(data))
            if reader.is_encrypted:
                reader.decrypt("")
            page_count = len(reader.pages)
        except Exception as exc:
            raise CodecError(f"Failed to load PDF file: {exc}") from exc
        return LoadedDocument(handle=reader, page_count=page_count, size_bytes=len(data))

    def new_document(self) -> OutputDocument:
        return OutputDocument(handle=PdfWriter())

    def copy_page(self, source: LoadedDocument, index: int, target: OutputDocument) -> None:
        if index < 0 or index >= source.page_count:
            raise IndexError(f"Page index out of range: {index}")
        try:
            target.handle.add_page(source.handle.pages[index])
        except Exception as exc:
            raise CodecError(f"Failed to copy page {index + 1}: {exc}") from exc
        target.source_pages.append(index + 1)

    def pages(self, document: OutputDocument) -> list[PageHandle]:
        return [
            PageHandle(page_number=position, source_page=source, page=page)
            for position, (source, page) in enumerate(
                zip(document.source_pages, document.handle.pages), start=1
            )
        ]

    def serialize(self, document: OutputDocument) -> bytes:
        buf = BytesIO()
        try:
            document.handle.write(buf)
        except Exception as exc:
            raise SerializeError(f"Failed to write PDF: {exc}") from exc
        return buf.getvalue()

    def page_size(self, page: PageHandle) -> tuple[float, float]:
        box = page.page.cropbox
        width, height = float(box.width), float(box.height)
        rotation = int(page.page.rotation or 0)
        if rotation % 180 == 90:
            width, height = height, width
        return abs(width), abs(height)

    def _single_page_pdf(self, page: PageHandle) -> bytes:
        writer = PdfWriter()
        writer.add_page(page.page)
        buf = BytesIO()
        writer.write(buf)
        return buf.getvalue()

    def render(self, page: PageHandle, scale: float) -> Image.Image:
        document = pdfium.PdfDocument(self._single_page_pdf(page))
        try:
            pdf_page = document[0]
            try:
                image = pdf_page.render(scale=scale).to_pil().copy()
            finally:
                pdf_page.close()
        finally:
            document.close()
        return image


def default_backend() -> DocumentBackend:
    return PdfBackend()


__all__ = [
    "CodecError",
    "SerializeError",
    "LoadedDocument",
    "OutputDocument",
    "PageHandle",
    "DocumentBackend",
    "PdfBackend",
    "default_backend",
]
