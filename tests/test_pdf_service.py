import math
import warnings
from io import BytesIO

import fitz  # PyMuPDF
import pytest
from PIL import Image
from pypdf import PdfReader, PdfWriter

from imageseal.core.errors import UnsupportedFormat
from imageseal.models import WatermarkOptions
from imageseal.services.fonts import EmbeddedFontProvider
from imageseal.services.pdf_service import PDFWatermarkService


@pytest.fixture(params=[1, 4], ids=["sequential", "threaded"])
def service(request) -> PDFWatermarkService:
    return PDFWatermarkService(font_provider=EmbeddedFontProvider(), max_workers=request.param)


def test_every_page_is_watermarked(service, make_pdf) -> None:
    options = WatermarkOptions(text="SEAL", font_size=24, angle=0)

    rendered = service.add_watermark(make_pdf(), "report.pdf", options)

    assert rendered.mime_type == "application/pdf"
    assert rendered.filename == "report_watermarked.pdf"
    assert rendered.page_count == 2

    reader = PdfReader(BytesIO(rendered.content))
    assert len(reader.pages) == 2
    for number, page in enumerate(reader.pages, start=1):
        text = page.extract_text()
        assert f"page {number}" in text
        assert "SEAL" in text


def test_page_sizes_are_preserved(service, make_pdf) -> None:
    options = WatermarkOptions(text="SEAL")

    rendered = service.add_watermark(make_pdf(), "report.pdf", options)

    pages = PdfReader(BytesIO(rendered.content)).pages
    assert (float(pages[0].mediabox.width), float(pages[0].mediabox.height)) == pytest.approx((612, 792))
    assert (float(pages[1].mediabox.width), float(pages[1].mediabox.height)) == pytest.approx((792, 612))


def test_rotated_page_is_watermarked_as_displayed(service, make_pdf) -> None:
    source = PdfReader(BytesIO(make_pdf(page_sizes=[(612, 792)])))
    writer = PdfWriter()
    writer.add_page(source.pages[0])
    writer.pages[0].rotate(90)
    buffer = BytesIO()
    writer.write(buffer)

    rendered = service.add_watermark(buffer.getvalue(), "rotated.pdf", WatermarkOptions(text="SEAL"))

    page = PdfReader(BytesIO(rendered.content)).pages[0]
    assert page.rotation == 0
    assert float(page.mediabox.width) == pytest.approx(792)
    assert float(page.mediabox.height) == pytest.approx(612)


def test_invalid_pdf_is_unsupported(service) -> None:
    with pytest.raises(UnsupportedFormat):
        service.add_watermark(b"%PDF-1.4 broken", "broken.pdf", WatermarkOptions(text="SEAL"))


def test_overlay_is_merged_without_deprecation(make_pdf) -> None:
    service = PDFWatermarkService(font_provider=EmbeddedFontProvider(), max_workers=1)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        service.add_watermark(make_pdf(), "report.pdf", WatermarkOptions(text="SEAL"))

    deprecations = [w for w in caught if issubclass(w.category, DeprecationWarning) and "pypdf" in w.filename]
    assert deprecations == []


def _render_first_page(pdf_bytes: bytes) -> Image.Image:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
        pixmap = document[0].get_pixmap(colorspace=fitz.csGRAY, alpha=False)
        return Image.frombytes("L", (pixmap.width, pixmap.height), pixmap.samples)


@pytest.mark.parametrize("angle", [-30, 60])
def test_single_tile_is_rotated_about_its_center(make_pdf, ink_centroid, angle) -> None:
    service = PDFWatermarkService(font_provider=EmbeddedFontProvider(), max_workers=1)
    blank = make_pdf(page_sizes=[(300, 300)], labelled=False)

    def render(degrees: float) -> Image.Image:
        options = WatermarkOptions(
            text="HOH", font_size=40, color="#000000", opacity=100, angle=degrees, spacing=2000
        )
        return _render_first_page(service.add_watermark(blank, "blank.pdf", options).content)

    upright_x, upright_y = ink_centroid(render(0))
    dx, dy = upright_x - 150, upright_y - 150
    assert abs(dx) < 2

    # the page y axis points up, so on the rendered pixmap the turn is counter-clockwise
    theta = math.radians(angle)
    expected = (150 + dx * math.cos(theta) + dy * math.sin(theta), 150 - dx * math.sin(theta) + dy * math.cos(theta))
    assert ink_centroid(render(angle)) == pytest.approx(expected, abs=2.5)
