"""pytest 공용 fixture.

- client: TestClient
- asset_dir: ASSET_DIR을 임시 디렉토리로 바꾼 경로 (오버레이 이미지 저장용)
- make_png / make_overlay: 메모리/디스크에 테스트 이미지를 만든다
"""

import io
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# src/ 디렉토리를 import path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from core.config import settings
from main import app


def png_bytes(width: int = 200, height: int = 200, color="black", mode: str = "RGB") -> bytes:
    """테스트용 단색 PNG 바이트를 만든다."""
    buf = io.BytesIO()
    Image.new(mode, (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def make_png():
    return png_bytes


@pytest.fixture()
def asset_dir(tmp_path, monkeypatch):
    """ASSET_DIR을 테스트마다 새 임시 디렉토리로 바꾼다."""
    monkeypatch.setattr(settings, "ASSET_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture()
def make_overlay(asset_dir):
    """ASSET_DIR 아래에 불투명 단색 오버레이 PNG를 저장하고 상대 경로를 반환한다."""

    def _make(width: int, height: int, name: str = "logo.png", color=(255, 0, 0, 255)) -> str:
        Image.new("RGBA", (width, height), color=color).save(asset_dir / name)
        return name

    return _make


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
