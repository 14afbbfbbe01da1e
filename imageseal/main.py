# imageseal/main.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imageseal.api import routers
from imageseal.core.config import get_settings
from imageseal.core.errors import RenderFailure, WatermarkError
from imageseal.core.logging import configure_logging
from imageseal.models import ApiResponse

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
)

# === CORS ===
allow_origins = [origin.strip() for origin in settings.allow_origins if origin.strip()] or ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# === Routers ===
for router in routers:
    app.include_router(router)


# === Errors ===
@app.exception_handler(WatermarkError)
async def watermark_error_handler(request: Request, exc: WatermarkError) -> JSONResponse:
    if isinstance(exc, RenderFailure):
        logger.error("فشل إضافة العلامة المائية (%s)", request.url.path, exc_info=exc)
    else:
        logger.warning("طلب مرفوض (%s): %s", request.url.path, exc.message)

    body = ApiResponse[None](success=False, message=f"فشل إضافة العلامة المائية: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True))


# === Basic endpoints ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": f"Welcome to {settings.app_name}"}


@app.get("/health")
async def health_check() -> dict:
    logger.debug("Health check invoked")
    return {"status": "ok", "message": "ImageSeal API is running"}
