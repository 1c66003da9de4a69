"""폰트 해석, 텍스트 폭 측정, 폰트 크기 맞춤.

패밀리 이름 → 폰트 파일 해석 순서:
1. register_font()로 등록한 패밀리
2. 일반 패밀리 별칭 (monospace, sans-serif, serif → DejaVu)
3. 패밀리 문자열 자체를 폰트 파일 이름/경로로 시도 (시스템 폰트 경로 + FONT_DIRS)
4. Pillow 내장 기본 폰트
"""

import os
import threading
from collections.abc import Callable
from functools import lru_cache

from loguru import logger
from PIL import ImageFont

from core.config import settings
from utility.paths import to_absolute

GENERIC_FAMILIES = {
    "monospace": ["DejaVuSansMono.ttf", "LiberationMono-Regular.ttf"],
    "sans-serif": ["DejaVuSans.ttf", "LiberationSans-Regular.ttf"],
    "serif": ["DejaVuSerif.ttf", "LiberationSerif-Regular.ttf"],
}

_registry: dict[str, str] = {}
_registry_lock = threading.Lock()


def register_font(path: str, family: str) -> None:
    """폰트 파일을 패밀리 이름으로 등록한다. 이후 해당 패밀리는 이 파일로 렌더링된다."""
    font_path = str(to_absolute(path))
    with _registry_lock:
        _registry[family] = font_path
        load_font.cache_clear()
    logger.debug(f"font registered: {family} -> {font_path}")


def _candidates(family: str) -> list[str]:
    with _registry_lock:
        registered = _registry.get(family)
    names = [registered] if registered else []
    names += GENERIC_FAMILIES.get(family.lower(), [])
    names.append(family)

    candidates = []
    for name in names:
        candidates.append(name)
        for font_dir in settings.FONT_DIRS:
            candidates.append(os.path.join(font_dir, name))
            if not os.path.splitext(name)[1]:
                candidates.append(os.path.join(font_dir, f"{name}.ttf"))
    return candidates


@lru_cache(maxsize=256)
def load_font(family: str, size: int) -> ImageFont.FreeTypeFont:
    """패밀리와 픽셀 크기로 폰트를 연다. 찾지 못하면 Pillow 기본 폰트를 쓴다."""
    for candidate in _candidates(family):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.warning(f"font '{family}' not found, falling back to default font")
    return ImageFont.load_default(size=size)


def measure_text_width(text: str, family: str, size: int) -> float:
    """해당 폰트로 렌더링했을 때의 텍스트 advance 폭(px)."""
    return load_font(family, size).getlength(text)


def fit_font_size(
    text: str,
    family: str,
    start_size: int,
    max_width: float,
    measure: Callable[[str, str, int], float] = measure_text_width,
) -> tuple[str, int]:
    """텍스트 폭이 max_width 이하가 될 때까지 폰트 크기를 1씩 줄인다.

    이진 탐색이 아닌 선형 탐색이다. 크기가 0 이하가 되면 더 측정하지 않고
    그 값을 그대로 돌려준다 (크기 0 텍스트는 그리지 않는다).
    패밀리가 비어 있으면 측정 없이 start_size를 돌려준다.
    """
    size = start_size
    while family and size > 0:
        if measure(text, family, size) <= max_width:
            break
        size -= 1
    return family, size
