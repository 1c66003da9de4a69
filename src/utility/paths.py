"""에셋 경로 해석 유틸리티."""

from pathlib import Path

from core.config import settings


def to_absolute(path: str | Path) -> Path:
    """상대 경로를 ASSET_DIR 기준 절대 경로로 바꾼다. 절대 경로는 그대로 둔다."""
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return (Path(settings.ASSET_DIR) / path).resolve()


def is_within_assets(path: str | Path) -> bool:
    """경로가 ASSET_DIR 안쪽을 가리키는지 확인한다."""
    root = Path(settings.ASSET_DIR).resolve()
    return to_absolute(path).resolve().is_relative_to(root)
