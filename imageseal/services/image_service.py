from __future__ import annotations

import math
from dataclasses import dataclass
from io import BytesIO
from typing import Sequence

from PIL import Image, ImageDraw, UnidentifiedImageError

from imageseal.core.errors import RenderFailure, UnsupportedFormat
from imageseal.core.logging import configure_logging
from imageseal.core.tiling import CanvasExtent, GlyphBox, TilePlacement, generate
from imageseal.models import WatermarkOptions
from imageseal.services.fonts import FontProvider, get_font_provider
from imageseal.utils.colors import parse_color
from imageseal.utils.file_utils import watermarked_filename

logger = configure_logging("image")

# هامش حول النص داخل البلاطة حتى لا تُقص حواف الحروف بعد التدوير
TILE_PADDING = 2


@dataclass
class RenderedDocument:
    content: bytes
    mime_type: str
    filename: str
    page_count: int = 1


class ImageWatermarkService:
    """إضافة علامة مائية نصية مكررة ومدوّرة إلى الصور باستخدام Pillow."""

    def __init__(self, font_provider: FontProvider | None = None) -> None:
        self.font_provider = font_provider or get_font_provider()

    def add_watermark(self, data: bytes, filename: str, options: WatermarkOptions) -> RenderedDocument:
        image = self._open_image(data)
        fill = parse_color(options.color, options.opacity)

        try:
            font = self.font_provider.image_font(options.effective_font_size)
            glyph_box, origin = self._measure(options.text, font)
        except (OSError, ValueError) as exc:
            raise RenderFailure(f"تعذر تحميل الخط بالحجم {options.effective_font_size}: {exc}") from exc

        placements = generate(
            CanvasExtent(image.width, image.height),
            glyph_box,
            options.tile_spec(),
        )
        logger.debug("رسم %s علامة على صورة %sx%s", len(placements), image.width, image.height)

        try:
            tile = self._create_tile(options.text, font, fill, glyph_box, origin, options.angle)
            result = self._compose(image, tile, glyph_box, placements)

            buffer = BytesIO()
            result.save(buffer, format="PNG")
        except (OSError, ValueError) as exc:
            raise RenderFailure(f"تعذر رسم العلامة المائية على الصورة: {exc}") from exc

        return RenderedDocument(
            content=buffer.getvalue(),
            mime_type="image/png",
            filename=watermarked_filename(filename, "png"),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _open_image(data: bytes) -> Image.Image:
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise UnsupportedFormat(f"صيغة الصورة غير مدعومة: {exc}") from exc
        except OSError as exc:
            raise UnsupportedFormat(f"تعذر قراءة الصورة: {exc}") from exc
        # الصور المتحركة: الإطار الأول فقط
        return image.convert("RGBA")

    @staticmethod
    def _measure(text: str, font) -> tuple[GlyphBox, tuple[float, float]]:
        """قياس صندوق النص بالخط نفسه المستخدم في الرسم، مع إزاحة بدايته."""
        scratch = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        left, top, right, bottom = scratch.textbbox((0, 0), text, font=font)
        return GlyphBox(float(right - left), float(bottom - top)), (left, top)

    @staticmethod
    def _create_tile(
        text: str,
        font,
        fill: tuple[int, int, int, int],
        glyph_box: GlyphBox,
        origin: tuple[float, float],
        angle: float,
    ) -> Image.Image:
        """
        رسم النص مرة واحدة في بلاطة شفافة ثم تدويرها.

        محور y في الصور يتجه للأسفل بينما يدوّر Pillow عكس عقارب الساعة،
        لذا تُدوَّر البلاطة بالزاوية السالبة لتطابق دوران الشبكة.
        """
        tile = Image.new(
            "RGBA",
            (math.ceil(glyph_box.width) + 2 * TILE_PADDING, math.ceil(glyph_box.height) + 2 * TILE_PADDING),
            (0, 0, 0, 0),
        )
        left, top = origin
        ImageDraw.Draw(tile).text((TILE_PADDING - left, TILE_PADDING - top), text, font=font, fill=fill)

        if angle % 360 != 0:
            tile = tile.rotate(-angle, resample=Image.Resampling.BICUBIC, expand=True)
        return tile

    @staticmethod
    def _stamp(overlay: Image.Image, tile: Image.Image, placement: TilePlacement, offset: tuple[int, int]) -> None:
        dest_x = round(placement.center_x - tile.width / 2) + offset[0]
        dest_y = round(placement.center_y - tile.height / 2) + offset[1]
        overlay.alpha_composite(tile, dest=(dest_x, dest_y))

    @classmethod
    def _compose(
        cls,
        base: Image.Image,
        tile: Image.Image,
        glyph_box: GlyphBox,
        placements: Sequence[TilePlacement],
    ) -> Image.Image:
        # طبقة أكبر من الصورة حتى تبقى إحداثيات اللصق موجبة للمواضع على الحواف
        pad_x = tile.width + math.ceil(glyph_box.width)
        pad_y = tile.height + math.ceil(glyph_box.height)
        overlay = Image.new("RGBA", (base.width + 2 * pad_x, base.height + 2 * pad_y), (0, 0, 0, 0))

        for placement in placements:
            cls._stamp(overlay, tile, placement, (pad_x, pad_y))

        overlay = overlay.crop((pad_x, pad_y, pad_x + base.width, pad_y + base.height))
        return Image.alpha_composite(base, overlay)
