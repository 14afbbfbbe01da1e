"""
توليد شبكة مواضع العلامة المائية المكررة.

الشبكة تُبنى في إطار محلي غير مدوّر مركزه منتصف الصفحة، ثم تُدوَّر حول
المركز بزاوية العلامة. يُستخدم قطر الصفحة لتحديد امتداد الشبكة حتى تبقى
الزوايا مغطاة مهما كانت الزاوية، وتُستبعد المواضع التي لا يمكن أن تظهر.

هذه الوحدة هندسية بحتة ولا تعرف شيئًا عن Pillow أو ReportLab؛ كل من
مُصيِّر الصور ومُصيِّر صفحات PDF يستدعي ``generate`` بالطريقة نفسها.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List

from .errors import InvalidCanvas, InvalidParameter

DEFAULT_SPACING_MARGIN = 100.0
DEFAULT_ANGLE_DEGREES = -30.0


@dataclass(frozen=True)
class CanvasExtent:
    width: float
    height: float


@dataclass(frozen=True)
class GlyphBox:
    """الصندوق المحيط بنص العلامة بحجم الخط المطلوب (بوحدة الصفحة نفسها)."""

    width: float
    height: float


@dataclass(frozen=True)
class TileSpec:
    spacing_margin: float = DEFAULT_SPACING_MARGIN
    angle_degrees: float = DEFAULT_ANGLE_DEGREES
    text_color: str = "#888888"
    opacity_percent: int = 30

    @property
    def effective_margin(self) -> float:
        return self.spacing_margin if self.spacing_margin > 0 else DEFAULT_SPACING_MARGIN


@dataclass(frozen=True)
class TilePlacement:
    center_x: float
    center_y: float
    angle_degrees: float


@dataclass(frozen=True)
class LatticeDimensions:
    cols: int
    rows: int

    @property
    def max_placements(self) -> int:
        """الحد الأعلى لعدد المواضع: طول نطاقي الفهارس الشاملين."""
        return (2 * (self.cols // 2) + 1) * (2 * (self.rows // 2) + 1)


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidParameter(f"{name} must be a finite number, got {value!r}")


def _validate(canvas: CanvasExtent, glyph_box: GlyphBox, spec: TileSpec) -> None:
    _require_finite("canvas.width", canvas.width)
    _require_finite("canvas.height", canvas.height)
    if canvas.width <= 0 or canvas.height <= 0:
        raise InvalidCanvas(
            f"canvas dimensions must be positive, got {canvas.width}x{canvas.height}"
        )

    _require_finite("glyph_box.width", glyph_box.width)
    _require_finite("glyph_box.height", glyph_box.height)
    if glyph_box.width < 0 or glyph_box.height < 0:
        raise InvalidParameter(
            f"glyph box dimensions must not be negative, got {glyph_box.width}x{glyph_box.height}"
        )

    _require_finite("spec.angle_degrees", spec.angle_degrees)
    # NaN <= 0 خاطئ، لذا يجب فحصه قبل الرجوع إلى الهامش الافتراضي
    _require_finite("spec.spacing_margin", spec.spacing_margin)


def lattice_dimensions(canvas: CanvasExtent, glyph_box: GlyphBox, spec: TileSpec) -> LatticeDimensions:
    """عدد الأعمدة والصفوف اللازمة لتغطية قطر الصفحة في الاتجاهين."""
    _validate(canvas, glyph_box, spec)
    margin = spec.effective_margin
    diagonal = math.hypot(canvas.width, canvas.height)

    cols = math.ceil(2 * diagonal / (glyph_box.width + margin)) + 2
    rows = math.ceil(2 * diagonal / (glyph_box.height + margin)) + 2
    return LatticeDimensions(cols=cols, rows=rows)


def iter_placements(canvas: CanvasExtent, glyph_box: GlyphBox, spec: TileSpec) -> Iterator[TilePlacement]:
    dims = lattice_dimensions(canvas, glyph_box, spec)
    margin = spec.effective_margin
    horizontal_spacing = glyph_box.width + margin
    vertical_spacing = glyph_box.height + margin

    theta = math.radians(spec.angle_degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    center_x = canvas.width / 2
    center_y = canvas.height / 2

    for row in range(-(dims.rows // 2), dims.rows // 2 + 1):
        for col in range(-(dims.cols // 2), dims.cols // 2 + 1):
            x = col * horizontal_spacing
            y = row * vertical_spacing

            final_x = center_x + x * cos_t - y * sin_t
            final_y = center_y + x * sin_t + y * cos_t

            # الهامش غير مدوّر عمدًا: تقريب محافظ لا يستبعد موضعًا مرئيًا
            if (
                -glyph_box.width < final_x < canvas.width + glyph_box.width
                and -glyph_box.height < final_y < canvas.height + glyph_box.height
            ):
                yield TilePlacement(final_x, final_y, spec.angle_degrees)


def generate(canvas: CanvasExtent, glyph_box: GlyphBox, spec: TileSpec) -> List[TilePlacement]:
    """
    حساب كل مواضع العلامة المائية على صفحة واحدة.

    يتم التحقق من المدخلات قبل توليد أي موضع، وتُعاد القائمة كاملة بترتيب
    ثابت (الصفوف تصاعديًا ثم الأعمدة تصاعديًا).

    Raises:
        InvalidCanvas: إذا كان العرض أو الارتفاع غير موجب.
        InvalidParameter: إذا كانت إحدى القيم الرقمية غير منتهية.
    """
    _validate(canvas, glyph_box, spec)
    return list(iter_placements(canvas, glyph_box, spec))
