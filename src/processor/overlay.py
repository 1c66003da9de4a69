"""워터마크 오버레이 생성.

모든 함수는 RGBA PIL.Image(투명 배경)를 반환한다.

- image_overlay:           오버레이 이미지 한 장 (원본 절반 크기 이내로 축소)
- pattern_image_overlay:   -45° 회전한 오버레이 이미지를 원본 전체에 반복
- caption_overlay:         텍스트 한 줄 (우측 하단 정렬)
- pattern_caption_overlay: -45° 회전한 텍스트를 원본 전체에 반복
"""

import math

from loguru import logger
from PIL import Image, ImageDraw, ImageOps

from core.exceptions import DecodeError, MissingParameter
from model.options import (
    DEFAULT_FONT,
    ImageMetadata,
    OverlayVariant,
    RGBA,
    WatermarkOptions,
)
from processor.fonts import fit_font_size, load_font
from processor.geometry import compute_tile, diagonal_tile, fill_pattern
from utility.paths import to_absolute

TRANSPARENT = (0, 0, 0, 0)


def _open_overlay(overlay_path: str) -> Image.Image:
    path = to_absolute(overlay_path)
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except OSError as e:
        raise DecodeError(f"오버레이 이미지를 읽을 수 없습니다: {overlay_path}") from e


def _draw_text(
    draw: ImageDraw.ImageDraw,
    xy: tuple[float, float],
    text: str,
    family: str,
    size: int,
    fill: RGBA,
    anchor: str,
) -> None:
    # 크기 0 이하로 맞춰진 텍스트는 보이지 않는 것으로 취급한다
    if not text or size <= 0:
        return
    draw.text(xy, text, fill=fill, font=load_font(family, size), anchor=anchor)


def image_overlay(
    overlay_path: str | None, width: int | None, height: int | None
) -> Image.Image:
    """오버레이 이미지를 (width/2, height/2) 박스 안으로 축소해 투명 여백과 함께 반환한다.

    오버레이가 박스보다 작은 축은 원래 크기를 유지한다. 확대하지 않는다.
    """
    if not overlay_path or not width or not height:
        raise MissingParameter

    overlay = _open_overlay(overlay_path)
    box_w = width // 2 if overlay.width > width / 2 else overlay.width
    box_h = height // 2 if overlay.height > height / 2 else overlay.height
    if box_w <= 0 or box_h <= 0:
        return Image.new("RGBA", (max(box_w, 0), max(box_h, 0)), TRANSPARENT)

    return ImageOps.pad(
        overlay, (box_w, box_h), method=Image.Resampling.LANCZOS, color=TRANSPARENT
    )


def pattern_image_overlay(
    overlay_path: str | None, ratio: float, meta: ImageMetadata
) -> Image.Image:
    if not overlay_path:
        raise MissingParameter

    overlay = _open_overlay(overlay_path)
    tile = compute_tile(meta, ratio)
    side = int(tile.side)
    if side <= 0:
        return Image.new("RGBA", (meta.width, meta.height), TRANSPARENT)

    square = ImageOps.pad(
        overlay, (side, side), method=Image.Resampling.LANCZOS, color=TRANSPARENT
    )
    return fill_pattern(diagonal_tile(square, tile.diagonal), (meta.width, meta.height))


def caption_overlay(
    text: str,
    width: int,
    height: int,
    font: str = DEFAULT_FONT,
    font_size: int = 48,
    font_color: RGBA = (255, 255, 255, 178),
) -> Image.Image:
    """width × height 투명 캔버스의 우측 하단 모서리에 맞춰 텍스트를 그린다."""
    canvas = Image.new("RGBA", (width, height), TRANSPARENT)
    family, size = fit_font_size(text, font, font_size, width)
    _draw_text(ImageDraw.Draw(canvas), (width, height), text, family, size, font_color, "rd")
    return canvas


def caption_tile(
    text: str,
    ratio: float,
    meta: ImageMetadata,
    font: str = DEFAULT_FONT,
    font_size: int = 48,
    font_color: RGBA = (255, 255, 255, 178),
) -> Image.Image:
    """반복 배치 전의 텍스트 타일 한 장 (diagonal × diagonal)."""
    tile = compute_tile(meta, ratio)
    if tile.diagonal <= 0:
        return Image.new("RGBA", (0, 0), TRANSPARENT)

    # 회전 전 좌표계에서 원점 바깥으로 삐져나온 글자도 잘리지 않게 여백을 둔다
    margin = tile.diagonal
    extent = math.ceil(tile.side) + 2 * margin
    layer = Image.new("RGBA", (extent, extent), TRANSPARENT)

    family, size = fit_font_size(text, font, font_size, tile.side)
    center = margin + tile.side / 2
    _draw_text(ImageDraw.Draw(layer), (center, center), text, family, size, font_color, "mm")
    return diagonal_tile(layer, tile.diagonal, offset=margin)


def pattern_caption_overlay(
    text: str,
    ratio: float,
    meta: ImageMetadata,
    font: str = DEFAULT_FONT,
    font_size: int = 48,
    font_color: RGBA = (255, 255, 255, 178),
) -> Image.Image:
    tile = caption_tile(text, ratio, meta, font, font_size, font_color)
    return fill_pattern(tile, (meta.width, meta.height))


def target_size(meta: ImageMetadata, options: WatermarkOptions) -> tuple[int, int]:
    """요청한 width/height(없으면 원본 크기)를 원본 크기 이하로 자른다."""
    width = min(options.width or meta.width, meta.width)
    height = min(options.height or meta.height, meta.height)
    return width, height


def produce_overlay(meta: ImageMetadata, options: WatermarkOptions) -> Image.Image:
    """옵션에 맞는 오버레이 종류를 골라 생성한다."""
    width, height = target_size(meta, options)
    variant = OverlayVariant.from_options(options)
    logger.debug(
        f"overlay {variant.value} | source {meta.width}x{meta.height} | target {width}x{height}"
    )

    match variant:
        case OverlayVariant.SINGLE_IMAGE:
            return image_overlay(options.overlay_path, width, height)
        case OverlayVariant.TILED_IMAGE:
            return pattern_image_overlay(options.overlay_path, options.ratio, meta)
        case OverlayVariant.TILED_CAPTION:
            return pattern_caption_overlay(
                options.text,
                options.ratio,
                meta,
                options.font_family,
                options.font_size,
                options.font_color,
            )
        case OverlayVariant.SINGLE_CAPTION:
            return caption_overlay(
                options.text,
                width,
                height,
                options.font_family,
                options.font_size,
                options.font_color,
            )
