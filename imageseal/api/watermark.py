import base64
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from imageseal.core.config import get_settings
from imageseal.core.logging import configure_logging
from imageseal.models import ApiResponse, PdfWatermarkResult, WatermarkOptions, WatermarkResult
from imageseal.services.image_service import ImageWatermarkService
from imageseal.services.pdf_service import PDFWatermarkService
from imageseal.utils.file_utils import ensure_image, ensure_pdf
from imageseal.utils.pdf_preview import render_page_preview

router = APIRouter(prefix="/api/watermark", tags=["Watermark"])

settings = get_settings()
logger = configure_logging("api")
image_service = ImageWatermarkService()
pdf_service = PDFWatermarkService()


# ============ Helpers ============
async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="يرجى رفع ملف غير فارغ.")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"حجم الملف يتجاوز الحد المسموح ({settings.max_upload_mb} ميغابايت).",
        )
    return data


def _build_options(text: str, font_size: int, color: str, opacity: int, angle: float, spacing: int) -> WatermarkOptions:
    if not text or not text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="يرجى إدخال نص العلامة المائية.")
    return WatermarkOptions(
        text=text,
        font_size=font_size,
        color=color,
        opacity=opacity,
        angle=angle,
        spacing=spacing,
    )


def _preview(pdf_bytes: bytes, page_count: int) -> Optional[str]:
    if not settings.pdf_preview_enabled or page_count < 1:
        return None
    try:
        return render_page_preview(pdf_bytes, page_number=1, zoom=settings.preview_zoom)
    except Exception:
        logger.warning("تعذر إنشاء معاينة للصفحة الأولى", exc_info=True)
        return None


# ============ Endpoints ============
@router.post("/add", summary="إضافة علامة مائية نصية مكررة إلى صورة")
async def add_watermark(
    file: UploadFile = File(...),
    watermark_text: str = Form("", alias="watermarkText"),
    font_size: int = Form(settings.default_font_size, alias="fontSize"),
    color: str = Form(settings.default_color),
    opacity: int = Form(settings.default_opacity),
    angle: float = Form(settings.default_angle),
    spacing: int = Form(settings.default_spacing),
) -> ApiResponse[WatermarkResult]:
    ensure_image(file)
    options = _build_options(watermark_text, font_size, color, opacity, angle, spacing)
    data = await _read_upload(file)

    rendered = await run_in_threadpool(image_service.add_watermark, data, file.filename, options)

    logger.info("تمت إضافة العلامة المائية إلى الصورة: %s", file.filename)
    return ApiResponse[WatermarkResult](
        success=True,
        message="تمت إضافة العلامة المائية بنجاح.",
        data=WatermarkResult(
            image_base64=base64.b64encode(rendered.content).decode("utf-8"),
            mime_type=rendered.mime_type,
            file_name=rendered.filename,
        ),
    )


@router.post("/add-pdf", summary="إضافة علامة مائية نصية مكررة إلى كل صفحات ملف PDF")
async def add_pdf_watermark(
    file: UploadFile = File(...),
    watermark_text: str = Form("", alias="watermarkText"),
    font_size: int = Form(settings.default_font_size, alias="fontSize"),
    color: str = Form(settings.default_color),
    opacity: int = Form(settings.default_opacity),
    angle: float = Form(settings.default_angle),
    spacing: int = Form(settings.default_spacing),
) -> ApiResponse[PdfWatermarkResult]:
    ensure_pdf(file)
    options = _build_options(watermark_text, font_size, color, opacity, angle, spacing)
    data = await _read_upload(file)

    rendered = await run_in_threadpool(pdf_service.add_watermark, data, file.filename, options)
    preview = await run_in_threadpool(_preview, rendered.content, rendered.page_count)

    logger.info("تمت إضافة العلامة المائية إلى ملف PDF: %s، عدد الصفحات %s", file.filename, rendered.page_count)
    return ApiResponse[PdfWatermarkResult](
        success=True,
        message=f"تمت إضافة العلامة المائية بنجاح إلى {rendered.page_count} صفحة.",
        data=PdfWatermarkResult(
            pdf_base64=base64.b64encode(rendered.content).decode("utf-8"),
            mime_type=rendered.mime_type,
            file_name=rendered.filename,
            page_count=rendered.page_count,
            preview=preview,
        ),
    )


@router.get("/health", summary="فحص جاهزية خدمة العلامة المائية")
async def health() -> ApiResponse[str]:
    return ApiResponse[str](success=True, message="الخدمة تعمل بشكل طبيعي.", data="OK")
