from .watermark import ApiResponse, PdfWatermarkResult, WatermarkOptions, WatermarkResult

__all__ = [
    "ApiResponse",
    "PdfWatermarkResult",
    "WatermarkOptions",
    "WatermarkResult",
]
