"""Pillow 기반 이미지 디코딩/인코딩."""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from core.exceptions import DecodeError, EncodeError
from model.options import ImageMetadata

FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}

# 알파 채널을 저장할 수 없는 포맷
NO_ALPHA_FORMATS = {"JPEG", "PPM", "EPS", "PCX"}


def metadata_of(image: Image.Image) -> ImageMetadata:
    return ImageMetadata(width=image.width, height=image.height, format=image.format)


def decode_image(source: bytes | str | Path) -> tuple[Image.Image, ImageMetadata]:
    """바이트 또는 파일 경로에서 이미지를 읽어 픽셀까지 로드한다."""
    fp = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        image = Image.open(fp)
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"이미지를 읽을 수 없습니다: {e}") from e
    return image, metadata_of(image)


def pillow_format(fmt: str) -> str:
    """'png', 'jpg' 같은 이름을 Pillow 저장 포맷 이름으로 바꾼다."""
    name = fmt.strip().upper()
    name = FORMAT_ALIASES.get(name, name)
    Image.init()
    if name not in Image.SAVE:
        raise EncodeError(f"지원하지 않는 출력 포맷: {fmt}")
    return name


def mime_type(fmt: str) -> str:
    return Image.MIME.get(pillow_format(fmt), "application/octet-stream")


def encode_image(image: Image.Image, fmt: str) -> bytes:
    name = pillow_format(fmt)
    if name in NO_ALPHA_FORMATS and image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGB")

    buf = io.BytesIO()
    try:
        image.save(buf, format=name)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"{fmt} 포맷으로 저장할 수 없습니다: {e}") from e
    return buf.getvalue()
