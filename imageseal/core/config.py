from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/simhei.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


class Settings(BaseSettings):
    """إعدادات خدمة العلامة المائية مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "ImageSeal API"
    app_version: str = "0.1.0"

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    max_upload_mb: int = 50

    log_level: str = "INFO"

    # ترتيب البحث عن ملف الخط؛ يُستخدم الخط المدمج عند غياب الجميع
    font_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_FONT_PATHS))

    default_font_size: int = 30
    default_color: str = "#888888"
    default_opacity: int = 30
    default_angle: float = -30.0
    default_spacing: int = 100

    pdf_render_workers: int = Field(4, ge=1)
    pdf_preview_enabled: bool = True
    preview_zoom: float = 1.0

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()
