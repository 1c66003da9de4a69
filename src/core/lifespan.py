from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from core.config import settings
from core.fontconfig import activate_font_config
from utility.logger import setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === 시작 ===
    setup_logger()
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Asset dir: {settings.ASSET_DIR} | default format: {settings.DEFAULT_FORMAT}")

    activate_font_config(settings.FONT_CONFIG_PATH)

    app.state.settings = settings
    # 오버레이 생성/합성/인코딩은 CPU-bound라 전용 스레드풀에서 실행한다
    app.state.executor = ThreadPoolExecutor(
        max_workers=settings.WORKERS, thread_name_prefix="watermark"
    )
    logger.info(f"Executor ready ({settings.WORKERS} workers)")

    yield

    # === 종료 ===
    app.state.executor.shutdown(wait=True)
    logger.info("Shutting down")
