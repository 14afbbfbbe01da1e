from __future__ import annotations

import threading
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from imageseal.core.config import get_settings
from imageseal.core.logging import configure_logging

logger = configure_logging("fonts")


class FontProvider(Protocol):
    """مصدر الخطوط المستخدم في القياس والرسم لكلا المُصيِّرين."""

    name: str

    def image_font(self, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        ...

    def pdf_font_name(self) -> str:
        ...


class EmbeddedFontProvider:
    """الخط المدمج مع Pillow، و Helvetica المضمن في ReportLab لملفات PDF."""

    name = "embedded"

    def __init__(self) -> None:
        self._cached_fonts: Dict[int, ImageFont.FreeTypeFont] = {}

    def image_font(self, size: int) -> ImageFont.FreeTypeFont:
        if size not in self._cached_fonts:
            self._cached_fonts[size] = ImageFont.load_default(size=size)
        return self._cached_fonts[size]

    def pdf_font_name(self) -> str:
        return "Helvetica"


class SystemFontProvider:
    """خط TrueType من مسار على النظام، يُسجَّل مرة واحدة لدى ReportLab."""

    _register_lock = threading.Lock()

    def __init__(self, font_path: Path) -> None:
        self.font_path = Path(font_path)
        self.name = self.font_path.stem
        self._cached_fonts: Dict[int, ImageFont.FreeTypeFont] = {}

    def image_font(self, size: int) -> ImageFont.FreeTypeFont:
        if size not in self._cached_fonts:
            self._cached_fonts[size] = ImageFont.truetype(str(self.font_path), size)
        return self._cached_fonts[size]

    def pdf_font_name(self) -> str:
        with self._register_lock:
            if self.name not in pdfmetrics.getRegisteredFontNames():
                # في ملفات TTC يُستخدم الخط الفرعي الأول
                pdfmetrics.registerFont(TTFont(self.name, str(self.font_path), subfontIndex=0))
                logger.info("تم تسجيل الخط %s لملفات PDF", self.font_path)
        return self.name


def find_font_path(candidates: Iterable[str]) -> Optional[Path]:
    for candidate in candidates:
        path = Path(candidate)
        if path.is_file():
            return path
    return None


@lru_cache()
def get_font_provider() -> FontProvider:
    """اختيار أول خط متاح من الإعدادات، وإلا الرجوع إلى الخط المدمج."""
    settings = get_settings()
    font_path = find_font_path(settings.font_paths)
    if font_path is None:
        logger.warning("لم يتم العثور على أي خط من الإعدادات، استخدام الخط المدمج.")
        return EmbeddedFontProvider()

    logger.info("استخدام الخط: %s", font_path)
    return SystemFontProvider(font_path)
