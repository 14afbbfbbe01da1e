from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from imageseal.core.tiling import TileSpec

DEFAULT_FONT_SIZE = 30

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WatermarkOptions(CamelModel):
    text: str = Field(..., min_length=1, description="نص العلامة المائية.")
    font_size: int = Field(DEFAULT_FONT_SIZE, description="حجم الخط (القيم غير الموجبة تعني 30).")
    color: str = Field("#888888", description="لون العلامة بصيغة #RRGGBB.")
    opacity: int = Field(30, description="الشفافية بين 0 و 100.")
    angle: float = Field(-30.0, description="زاوية الدوران بالدرجات.")
    spacing: int = Field(100, description="المسافة الإضافية بين العلامات (القيم غير الموجبة تعني 100).")

    @property
    def effective_font_size(self) -> int:
        return self.font_size if self.font_size > 0 else DEFAULT_FONT_SIZE

    def tile_spec(self) -> TileSpec:
        return TileSpec(
            spacing_margin=float(self.spacing),
            angle_degrees=float(self.angle),
            text_color=self.color,
            opacity_percent=self.opacity,
        )


class WatermarkResult(CamelModel):
    image_base64: str
    mime_type: str = "image/png"
    file_name: str


class PdfWatermarkResult(CamelModel):
    pdf_base64: str
    mime_type: str = "application/pdf"
    file_name: str
    page_count: int
    preview: Optional[str] = Field(default=None, description="صورة مصغرة للصفحة الأولى (data URL).")


class ApiResponse(CamelModel, Generic[T]):
    success: bool
    message: str = ""
    data: Optional[T] = None
