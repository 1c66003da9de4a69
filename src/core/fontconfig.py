"""fontconfig 설정 경로 활성화.

FONTCONFIG_PATH는 프로세스 전역 환경 변수이므로 한 번만 설정한다.
이미 값이 있으면(외부에서 지정했거나 다른 요청이 먼저 설정) 건드리지 않는다.
"""

import os
import threading

from loguru import logger

from utility.paths import to_absolute

ENV_KEY = "FONTCONFIG_PATH"

_lock = threading.Lock()


def activate_font_config(config_path: str | None) -> bool:
    """FONTCONFIG_PATH가 비어 있으면 config_path로 설정한다.

    check-and-set을 락으로 감싸서 동시 요청이 경쟁해도 최종 값이 한 번만 정해진다.
    이번 호출에서 실제로 설정했으면 True를 반환한다.
    """
    if not config_path:
        return False

    with _lock:
        if os.environ.get(ENV_KEY):
            return False
        path = str(to_absolute(config_path))
        os.environ[ENV_KEY] = path

    logger.info(f"{ENV_KEY} activated: {path}")
    return True
