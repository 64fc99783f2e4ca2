from io import BytesIO

import pytest
from PIL import Image

from plugins.page_extract.core import (
    ImageFormat,
    PageRange,
    PdfBackend,
    RasterOptions,
    RasterOptionsError,
    RenderError,
    extract_pages,
    rasterize_page,
    target_size,
)


def _first_page(data: bytes, page: int = 1):
    backend = PdfBackend()
    document = backend.load(data)
    output = extract_pages(document, (PageRange(page, page),), backend=backend)
    return backend, backend.pages(output)[0]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scale": 0},
        {"scale": -1.5},
        {"scale": float("nan")},
        {"quality": 1.2},
        {"quality": -0.1},
        {"format": "gif"},
    ],
)
def test_raster_options_reject_invalid_values(kwargs):
    with pytest.raises(RasterOptionsError):
        RasterOptions(**kwargs)


def test_raster_options_accept_format_aliases():
    assert RasterOptions(format="jpg").format is ImageFormat.JPEG
    assert RasterOptions(format="PNG").format is ImageFormat.PNG


def test_target_size_floors_both_axes_and_keeps_one_pixel():
    assert target_size(101, 200, 1.5) == (151, 300)
    assert target_size(595.3, 841.9, 2) == (1190, 1683)
    assert target_size(10, 10, 0.01) == (1, 1)


def test_rasterize_renders_floor_scaled_jpeg(make_pdf):
    # Page 1 of the fixture is 110 x 200 points.
    backend, page = _first_page(make_pdf(1))
    options = RasterOptions(scale=1.5, quality=0.8, format=ImageFormat.JPEG)

    first = rasterize_page(page, options, backend=backend)
    second = rasterize_page(page, options, backend=backend)

    assert (first.width, first.height) == (165, 300)
    assert (second.width, second.height) == (first.width, first.height)
    assert first.mime_type == "image/jpeg"
    assert first.data.startswith(b"\xff\xd8\xff")
    assert first.filename == "page_1.jpg"
    assert Image.open(BytesIO(first.data)).size == (165, 300)


def test_rasterize_odd_scale_uses_floor_rule(make_pdf):
    backend, page = _first_page(make_pdf(1))

    artifact = rasterize_page(page, RasterOptions(scale=1.25, format="png"), backend=backend)

    # 110 * 1.25 = 137.5 -> 137 and 200 * 1.25 = 250
    assert (artifact.width, artifact.height) == (137, 250)
    assert Image.open(BytesIO(artifact.data)).size == (137, 250)


def test_png_output_ignores_quality(make_pdf):
    backend, page = _first_page(make_pdf(1))

    low = rasterize_page(page, RasterOptions(scale=1, quality=0.1, format="png"), backend=backend)
    high = rasterize_page(page, RasterOptions(scale=1, quality=1.0, format="png"), backend=backend)

    assert low.data.startswith(b"\x89PNG")
    assert low.data == high.data
    assert low.filename == "page_1.png"


class _BrokenBackend(PdfBackend):
    def render(self, page, scale):
        raise RuntimeError("unsupported embedded resource")


def test_rasterize_wraps_backend_failures(make_pdf):
    _, page = _first_page(make_pdf(1))

    with pytest.raises(RenderError) as info:
        rasterize_page(page, RasterOptions(), backend=_BrokenBackend())

    assert info.value.page_number == 1
    assert "unsupported embedded resource" in info.value.reason
