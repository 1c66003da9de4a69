"""HTTP 요청 → 워터마크 파이프라인 연결.

HTTP로 들어온 overlayPath는 ASSET_DIR 밖을 가리킬 수 없다.
"""

from collections.abc import AsyncIterable, AsyncIterator
from concurrent.futures import Executor

from fastapi import UploadFile
from loguru import logger

from core.exceptions import InvalidOverlayPath
from model.options import WatermarkOptions, load_options
from processor.codec import mime_type
from processor.pipeline import apply_watermark_async, watermark_stream
from utility.paths import is_within_assets


def parse_request_options(raw: str | None) -> WatermarkOptions:
    """JSON 문자열 옵션을 검증하고 오버레이 경로가 에셋 디렉토리 안인지 확인한다."""
    options = load_options(raw)
    if options.overlay_path and not is_within_assets(options.overlay_path):
        raise InvalidOverlayPath(f"허용되지 않는 오버레이 경로: {options.overlay_path}")
    return options


async def watermark_upload(
    file: UploadFile, options: WatermarkOptions, executor: Executor | None = None
) -> tuple[bytes, str]:
    """업로드 파일 전체를 읽어 워터마크를 입힌다. (결과 바이트, MIME 타입) 반환."""
    data = await file.read()
    logger.info(f"watermark upload: {file.filename} ({len(data)} bytes) -> {options.format}")
    result = await apply_watermark_async(data, options, executor)
    return result, mime_type(options.format)


async def watermark_body(
    chunks: AsyncIterable[bytes],
    options: WatermarkOptions,
    executor: Executor | None = None,
) -> tuple[AsyncIterator[bytes], str]:
    """요청 본문 스트림에 워터마크를 입혀 청크 이터레이터로 돌려준다.

    첫 청크를 미리 꺼내 두어, 입력/디코딩 에러가 응답 헤더 전송 전에 예외로 올라오게 한다.
    """
    stream = watermark_stream(chunks, options, executor)
    first = await anext(stream, b"")

    async def _chained() -> AsyncIterator[bytes]:
        if first:
            yield first
        async for chunk in stream:
            yield chunk

    return _chained(), mime_type(options.format)
