"""스트리밍 모드 테스트: 전체 버퍼 모드와 같은 결과, 입력 에러 전파."""

import asyncio
import gc
import io

import pytest
from PIL import Image

from core.exceptions import DecodeError, StreamError
from processor.pipeline import apply_watermark, watermark_stream


async def _chunked(data: bytes, size: int = 97):
    for start in range(0, len(data), size):
        await asyncio.sleep(0)
        yield data[start : start + size]


async def _collect(chunks, options, **kwargs) -> list[bytes]:
    return [chunk async for chunk in watermark_stream(chunks, options, **kwargs)]


def _noisy_png(width: int, height: int) -> bytes:
    """압축이 덜 되도록 픽셀마다 값이 다른 PNG."""
    img = Image.new("RGB", (width, height))
    img.putdata([((x * 7) % 256, (y * 3) % 256, (x * y) % 256) for y in range(height) for x in range(width)])
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.mark.parametrize(
    "options",
    [
        {"text": "stream"},
        {"text": "stream", "pattern": True, "ratio": 20},
        {"text": "stream", "format": "jpeg"},
    ],
)
def test_stream_matches_whole_buffer(options):
    source = _noisy_png(160, 120)

    chunks = asyncio.run(_collect(_chunked(source), options))

    assert b"".join(chunks) == apply_watermark(source, options)


def test_stream_output_is_chunked():
    source = _noisy_png(160, 120)

    chunks = asyncio.run(_collect(_chunked(source), {"text": "x"}, chunk_size=1024))

    assert len(chunks) > 1
    assert all(len(c) <= 1024 for c in chunks)


def test_source_error_becomes_stream_error():
    source = _noisy_png(64, 64)

    async def _broken():
        yield source[:200]
        raise ConnectionError("client went away")

    with pytest.raises(StreamError):
        asyncio.run(_collect(_broken(), {"text": "x"}))


def test_garbage_stream_is_decode_error():
    async def _garbage():
        yield b"not an image at all" * 10

    with pytest.raises(DecodeError):
        asyncio.run(_collect(_garbage(), {"text": "x"}))


def test_truncated_stream_is_decode_error():
    source = _noisy_png(64, 64)

    with pytest.raises(DecodeError):
        asyncio.run(_collect(_chunked(source[: len(source) // 2]), {"text": "x"}))


def test_failed_overlay_is_consumed_when_source_fails(asset_dir):
    """오버레이 작업이 먼저 실패한 뒤 입력 스트림이 끊겨도 미회수 예외 경고가 남지 않는다."""
    source = _noisy_png(64, 64)
    reports = []

    async def _broken_after_header():
        yield source[:200]
        # 없는 오버레이 파일 → 오버레이 작업이 먼저 DecodeError로 끝난다
        await asyncio.sleep(0.3)
        raise ConnectionError("client went away")

    async def _run() -> bool:
        asyncio.get_running_loop().set_exception_handler(lambda loop, ctx: reports.append(ctx))
        try:
            await _collect(_broken_after_header(), {"overlayPath": "missing.png"})
        except StreamError:
            failed = True
        else:
            failed = False
        gc.collect()
        await asyncio.sleep(0)
        return failed

    assert asyncio.run(_run()) is True
    assert not [r for r in reports if "never retrieved" in r.get("message", "")]
