import base64

import fitz  # PyMuPDF


def render_page_preview(pdf_bytes: bytes, page_number: int = 1, zoom: float = 1.0) -> str:
    """
    إنشاء صورة مصغرة للصفحة المحددة داخل ملف PDF وإرجاعها كسلسلة base64.

    Args:
        pdf_bytes: محتوى ملف PDF.
        page_number: رقم الصفحة (يبدأ من 1).
        zoom: معامل التكبير.
    """
    if page_number < 1:
        raise ValueError("page_number must be >= 1")

    with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
        if page_number > document.page_count:
            raise ValueError("page_number exceeds document pages")

        page = document.load_page(page_number - 1)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        image_bytes = pixmap.tobytes("png")

    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:image/png;base64,{encoded}"
