import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

SLOW_THRESHOLD_MS = 500


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """모든 HTTP 요청을 로깅하는 미들웨어.

    기록 항목: 메서드, 경로, 클라이언트 IP, 상태코드, 응답 타입, 처리시간(ms)
    워터마크 합성은 이미지 크기에 따라 느릴 수 있어 500ms 초과 시 WARNING으로 기록.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        client_ip = request.client.host if request.client else "unknown"
        content_type = response.headers.get("content-type", "-")
        line = (
            f"{request.method} {request.url.path} | {client_ip} | "
            f"{response.status_code} | {content_type} | {elapsed_ms:.0f}ms"
        )

        if elapsed_ms > SLOW_THRESHOLD_MS:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)

        return response
