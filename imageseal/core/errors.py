class WatermarkError(Exception):
    """الخطأ الأساسي لكل حالات الفشل في مسار العلامة المائية."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCanvas(WatermarkError):
    """أبعاد الصفحة أو الصورة غير موجبة."""

    status_code = 422


class InvalidParameter(WatermarkError):
    """قيمة رقمية غير منتهية (NaN أو ∞) أو سالبة في غير موضعها."""

    status_code = 422


class UnsupportedFormat(WatermarkError):
    status_code = 415


class RenderFailure(WatermarkError):
    """فشل مكتبة الرسم أو الترميز أثناء تطبيق العلامة المائية."""

    status_code = 500
