import uvicorn
from fastapi import FastAPI

from core.config import settings
from core.error_handlers import app_exception_handler
from core.exceptions import AppException
from core.lifespan import lifespan
from core.middleware import RequestLoggingMiddleware
from router.watermark_router import router as watermark_router

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="이미지/텍스트 워터마크 오버레이 합성 API",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_exception_handler(AppException, app_exception_handler)

app.include_router(watermark_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        access_log=False,
    )
