"""워터마크 합성 파이프라인.

decode → 오버레이 생성 → 우측 하단(southeast) 기준 알파 합성 → 인코딩.

- apply_watermark:       전체 바이트(또는 파일 경로)를 받아 한 번에 처리
- apply_watermark_async: 같은 처리를 스레드풀에 위임 (이벤트 루프를 막지 않음)
- watermark_stream:      입력을 청크 단위로 받아 헤더가 파싱되는 즉시 오버레이 생성을 시작

세 경로 모두 같은 입력에 대해 같은 바이트를 출력한다.
"""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from concurrent.futures import Executor
from pathlib import Path

from loguru import logger
from PIL import Image, ImageFile

from core.config import settings
from core.exceptions import AppException, DecodeError, StreamError
from core.fontconfig import activate_font_config
from model.options import WatermarkOptions, load_options
from processor.codec import decode_image, encode_image, metadata_of, pillow_format
from processor.overlay import produce_overlay
from utility.timer import timer


def composite(image: Image.Image, overlay: Image.Image) -> Image.Image:
    """overlay의 우측 하단 모서리를 image의 우측 하단 모서리에 맞춰 알파 합성한다."""
    base = image.convert("RGBA")
    if overlay.width <= 0 or overlay.height <= 0:
        return base

    dest = (max(base.width - overlay.width, 0), max(base.height - overlay.height, 0))
    base.alpha_composite(overlay.convert("RGBA"), dest=dest)
    return base


def _prepare(options) -> WatermarkOptions:
    options = load_options(options)
    activate_font_config(options.config_path)
    # 잘못된 포맷은 디코딩/오버레이 생성 전에 거른다
    pillow_format(options.format)
    return options


def _finish(image: Image.Image, overlay: Image.Image, options: WatermarkOptions) -> bytes:
    return encode_image(composite(image, overlay), options.format)


def apply_watermark(source: bytes | str | Path, options=None) -> bytes:
    """원본 이미지(바이트 또는 경로)에 워터마크를 입혀 options.format으로 인코딩한다."""
    options = _prepare(options)
    with timer(f"watermark {options.format}"):
        image, meta = decode_image(source)
        overlay = produce_overlay(meta, options)
        return _finish(image, overlay, options)


async def apply_watermark_async(
    source: bytes | str | Path, options=None, executor: Executor | None = None
) -> bytes:
    """apply_watermark를 executor(기본: 루프 기본 스레드풀)에서 실행한다."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, apply_watermark, source, options)


async def watermark_stream(
    chunks: AsyncIterable[bytes],
    options=None,
    executor: Executor | None = None,
    chunk_size: int | None = None,
) -> AsyncIterator[bytes]:
    """입력 청크를 순서대로 파서에 넣고, 결과 이미지를 청크 단위로 내보낸다.

    헤더가 파싱되어 크기를 알게 되면 나머지 입력을 받는 동안 오버레이를 미리 만든다.
    입력 스트림에서 난 에러는 StreamError로 바꿔 전파하고, 진행 중인 오버레이 작업은 취소한다.
    """
    options = _prepare(options)
    chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE
    loop = asyncio.get_running_loop()

    parser = ImageFile.Parser()
    overlay_task: asyncio.Future | None = None
    received = 0

    source = aiter(chunks)
    try:
        while True:
            try:
                chunk = await anext(source)
            except StopAsyncIteration:
                break
            except AppException:
                raise
            except Exception as e:
                raise StreamError(f"입력 스트림을 읽는 중 오류가 발생했습니다: {e}") from e

            received += len(chunk)
            try:
                parser.feed(chunk)
            except (OSError, ValueError) as e:
                raise DecodeError(f"이미지를 읽을 수 없습니다: {e}") from e

            if overlay_task is None and parser.image is not None:
                meta = metadata_of(parser.image)
                logger.debug(f"stream header parsed after {received} bytes: {meta}")
                overlay_task = loop.run_in_executor(executor, produce_overlay, meta, options)

        try:
            image = parser.close()
        except (OSError, ValueError) as e:
            raise DecodeError(f"이미지를 읽을 수 없습니다: {e}") from e

        if overlay_task is None:
            overlay_task = loop.run_in_executor(
                executor, produce_overlay, metadata_of(image), options
            )
        overlay = await overlay_task
        data = await loop.run_in_executor(executor, _finish, image, overlay, options)
    except BaseException:
        if overlay_task is not None:
            if not overlay_task.done():
                overlay_task.cancel()
            elif not overlay_task.cancelled():
                # 이미 실패한 오버레이 작업의 예외는 읽어서 버린다 (입력 쪽 에러가 우선)
                overlay_task.exception()
        raise

    logger.debug(f"stream done: {received} bytes in, {len(data)} bytes out")
    for start in range(0, len(data), chunk_size):
        yield data[start : start + chunk_size]
