from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import partial
from io import BytesIO
from typing import List, Sequence, Tuple

from pypdf import PageObject, PdfReader, PdfWriter, Transformation
from pypdf.errors import PdfReadError
from reportlab.lib.colors import Color
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from imageseal.core.config import get_settings
from imageseal.core.errors import RenderFailure, UnsupportedFormat
from imageseal.core.logging import configure_logging
from imageseal.core.tiling import CanvasExtent, GlyphBox, TilePlacement, generate
from imageseal.models import WatermarkOptions
from imageseal.services.fonts import FontProvider, get_font_provider
from imageseal.services.image_service import RenderedDocument
from imageseal.utils.colors import parse_color, rgba_to_unit
from imageseal.utils.file_utils import watermarked_filename

logger = configure_logging("pdf")


class PDFWatermarkService:
    """إضافة علامة مائية نصية مكررة إلى كل صفحات ملف PDF (pypdf + ReportLab)."""

    def __init__(self, font_provider: FontProvider | None = None, max_workers: int | None = None) -> None:
        self.font_provider = font_provider or get_font_provider()
        self.max_workers = max_workers or get_settings().pdf_render_workers

    def add_watermark(self, data: bytes, filename: str, options: WatermarkOptions) -> RenderedDocument:
        writer = self._open_writer(data)
        pages = writer.pages

        font_name = self.font_provider.pdf_font_name()
        font_size = options.effective_font_size
        # ارتفاع النص في PDF يساوي حجم الخط
        glyph_box = GlyphBox(pdfmetrics.stringWidth(options.text, font_name, font_size), float(font_size))
        spec = options.tile_spec()

        layouts: List[Tuple[float, float, List[TilePlacement]]] = []
        for page in pages:
            if page.rotation % 360:
                page.transfer_rotation_to_content()
            width = float(page.mediabox.width)
            height = float(page.mediabox.height)
            layouts.append((width, height, generate(CanvasExtent(width, height), glyph_box, spec)))

        try:
            render = partial(
                self._create_overlay,
                text=options.text,
                font_name=font_name,
                font_size=font_size,
                fill=parse_color(options.color, options.opacity),
            )
            overlays = self._render_overlays(render, layouts)

            for page, overlay in zip(pages, overlays):
                origin = Transformation().translate(float(page.mediabox.left), float(page.mediabox.bottom))
                page.merge_transformed_page(overlay, origin)

            buffer = BytesIO()
            writer.write(buffer)
        except Exception as exc:
            raise RenderFailure(f"تعذر إضافة العلامة المائية إلى ملف PDF: {exc}") from exc

        logger.debug(
            "رسم %s علامة على %s صفحة",
            sum(len(placements) for _, _, placements in layouts),
            len(pages),
        )
        return RenderedDocument(
            content=buffer.getvalue(),
            mime_type="application/pdf",
            filename=watermarked_filename(filename, "pdf"),
            page_count=len(pages),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _open_writer(data: bytes) -> PdfWriter:
        """نسخ المستند إلى كاتب حتى تُدمج الطبقات في صفحات مرتبطة به."""
        try:
            reader = PdfReader(BytesIO(data))
            if reader.is_encrypted and not reader.decrypt(""):
                raise UnsupportedFormat("ملف PDF محمي بكلمة مرور.")
            return PdfWriter(clone_from=reader)
        except PdfReadError as exc:
            raise UnsupportedFormat(f"تعذر قراءة ملف PDF: {exc}") from exc

    def _render_overlays(self, render, layouts: Sequence[Tuple[float, float, List[TilePlacement]]]) -> List[PageObject]:
        # كل صفحة مستقلة تمامًا عن غيرها، لذا يمكن بناء طبقاتها بالتوازي
        if self.max_workers <= 1 or len(layouts) <= 1:
            return [render(*layout) for layout in layouts]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda layout: render(*layout), layouts))

    @staticmethod
    def _create_overlay(
        width: float,
        height: float,
        placements: Sequence[TilePlacement],
        *,
        text: str,
        font_name: str,
        font_size: int,
        fill: Tuple[int, int, int, int],
    ) -> PageObject:
        packet = BytesIO()
        c = canvas.Canvas(packet, pagesize=(width, height))

        red, green, blue, alpha = rgba_to_unit(fill)
        c.setFillColor(Color(red, green, blue, alpha=alpha))
        c.setFillAlpha(alpha)
        c.setFont(font_name, font_size)

        ascent, descent = pdfmetrics.getAscentDescent(font_name, font_size)
        baseline = -(ascent + descent) / 2

        for placement in placements:
            c.saveState()
            c.translate(placement.center_x, placement.center_y)
            c.rotate(placement.angle_degrees)
            c.drawCentredString(0, baseline, text)
            c.restoreState()

        c.save()
        packet.seek(0)
        return PdfReader(packet).pages[0]
