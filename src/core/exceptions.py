"""앱 전역 커스텀 예외 클래스.

AppException을 상속하면 전역 핸들러(error_handlers.py)가 자동으로
{"error_code": "...", "message": "..."} 형식의 JSON 응답을 생성한다.
파이프라인을 라이브러리로 직접 호출할 때도 같은 예외가 그대로 전파된다.
"""


class AppException(Exception):
    """앱 전역 베이스 예외.

    서브클래스에서 status_code, error_code, message를 클래스 변수로 정의하면
    전역 핸들러가 해당 값을 읽어 HTTP 응답을 생성한다.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "서버 내부 오류가 발생했습니다"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


# --- 옵션 관련 ---


class MissingParameter(AppException):
    status_code = 400
    error_code = "MISSING_PARAMETER"
    message = "워터마크에 필요한 파라미터가 전달되지 않았습니다"


class InvalidOptions(AppException):
    status_code = 422
    error_code = "INVALID_OPTIONS"
    message = "워터마크 옵션이 올바르지 않습니다"


class InvalidOverlayPath(AppException):
    status_code = 400
    error_code = "INVALID_OVERLAY_PATH"
    message = "허용되지 않는 오버레이 경로입니다"


# --- 이미지 코덱 관련 ---


class DecodeError(AppException):
    status_code = 400
    error_code = "INVALID_IMAGE"
    message = "이미지를 읽을 수 없습니다"


class EncodeError(AppException):
    status_code = 400
    error_code = "UNSUPPORTED_FORMAT"
    message = "지원하지 않는 출력 포맷입니다"


# --- 스트리밍 관련 ---


class StreamError(AppException):
    status_code = 400
    error_code = "STREAM_ERROR"
    message = "입력 스트림을 읽는 중 오류가 발생했습니다"
