from pathlib import Path

from fastapi import HTTPException, UploadFile, status

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}
PDF_EXTENSIONS = {".pdf"}


def file_extension(filename: str | None) -> str:
    return Path(filename or "").suffix.lower()


def ensure_image(upload: UploadFile) -> None:
    """التحقق من أن الملف المرفوع صورة بصيغة مدعومة."""
    if file_extension(upload.filename) not in IMAGE_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="صيغة الصورة غير مدعومة، يرجى رفع ملف JPG أو PNG أو GIF أو BMP أو WebP.",
        )


def ensure_pdf(upload: UploadFile) -> None:
    """التحقق من أن الملف المرفوع هو PDF."""
    if file_extension(upload.filename) not in PDF_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب أن يكون الملف من نوع PDF.",
        )


def watermarked_filename(original_name: str | None, extension: str) -> str:
    """بناء اسم الملف الناتج بالشكل ``<الاسم>_watermarked.<الامتداد>``."""
    stem = Path(original_name or "").stem or "document"
    return f"{stem}_watermarked.{extension.lstrip('.')}"
