import re
from typing import Tuple

FALLBACK_RGBA: Tuple[int, int, int, int] = (128, 128, 128, 77)

_HEX_RGB = re.compile(r"[0-9A-Fa-f]{6}")


def opacity_to_alpha(opacity: int) -> int:
    """تحويل الشفافية من النطاق 0-100 إلى قناة ألفا 0-255 مع القص."""
    return max(0, min(255, int(opacity) * 255 // 100))


def parse_color(color_hex: str | None, opacity: int) -> Tuple[int, int, int, int]:
    """
    تحويل لون بصيغة ``#RRGGBB`` إلى RGBA.

    عند تعذر القراءة يُعاد اللون الرمادي الافتراضي بشفافية 30%.
    """
    value = (color_hex or "").strip().lstrip("#")
    if not _HEX_RGB.fullmatch(value[:6]):
        return FALLBACK_RGBA
    r = int(value[0:2], 16)
    g = int(value[2:4], 16)
    b = int(value[4:6], 16)
    return r, g, b, opacity_to_alpha(opacity)


def rgba_to_unit(rgba: Tuple[int, int, int, int]) -> Tuple[float, float, float, float]:
    """تحويل RGBA إلى قيم بين 0 و 1 كما تتوقعها ReportLab."""
    return tuple(channel / 255 for channel in rgba)  # type: ignore[return-value]
