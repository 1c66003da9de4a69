"""오버레이 4종 생성 테스트."""

import pytest
from PIL import Image

from core.exceptions import DecodeError, MissingParameter
from model.options import ImageMetadata, WatermarkOptions
from processor.overlay import (
    caption_overlay,
    caption_tile,
    image_overlay,
    pattern_caption_overlay,
    pattern_image_overlay,
    produce_overlay,
    target_size,
)


def _alpha_bbox(image: Image.Image):
    return image.getchannel("A").getbbox()


class TestImageOverlay:
    def test_large_overlay_is_limited_to_half(self, make_overlay):
        """원본 절반보다 큰 오버레이는 (width//2, height//2) 박스로 축소된다."""
        path = make_overlay(300, 300)
        overlay = image_overlay(path, 201, 151)

        assert overlay.size == (100, 75)

    def test_aspect_ratio_is_letterboxed(self, make_overlay):
        """비율이 다르면 잘라내지 않고 투명 여백을 둔다."""
        path = make_overlay(300, 100)
        overlay = image_overlay(path, 200, 200)

        assert overlay.size == (100, 100)
        assert overlay.getpixel((50, 50))[3] == 255
        assert overlay.getpixel((50, 2))[3] == 0
        assert overlay.getpixel((50, 97))[3] == 0

    def test_small_overlay_keeps_native_size(self, make_overlay):
        path = make_overlay(40, 30)
        overlay = image_overlay(path, 200, 200)

        assert overlay.size == (40, 30)

    @pytest.mark.parametrize(
        "path, width, height", [(None, 100, 100), ("logo.png", None, 100), ("logo.png", 100, 0)]
    )
    def test_missing_parameter(self, path, width, height):
        with pytest.raises(MissingParameter):
            image_overlay(path, width, height)

    def test_missing_file(self, asset_dir):
        with pytest.raises(DecodeError):
            image_overlay("nope.png", 100, 100)


class TestPatternImageOverlay:
    def test_fills_whole_source(self, make_overlay):
        path = make_overlay(50, 50)
        meta = ImageMetadata(width=400, height=300)

        overlay = pattern_image_overlay(path, 25, meta)

        assert overlay.size == (400, 300)
        # 첫 타일(173×173)의 중심은 칠해지고 모서리는 비어 있다
        assert overlay.getpixel((86, 86))[3] > 0
        assert overlay.getpixel((1, 1))[3] == 0

    def test_missing_path(self):
        with pytest.raises(MissingParameter):
            pattern_image_overlay(None, 25, ImageMetadata(width=100, height=100))


class TestCaptionOverlay:
    def test_size_and_bottom_right_anchor(self):
        overlay = caption_overlay("HH", 120, 60)

        assert overlay.size == (120, 60)
        left, top, right, bottom = _alpha_bbox(overlay)
        assert right >= 120 - 12
        assert bottom <= 60
        assert left > 0

    def test_empty_text_is_transparent(self):
        overlay = caption_overlay("", 80, 40)
        assert overlay.size == (80, 40)
        assert _alpha_bbox(overlay) is None

    def test_font_color_is_used(self):
        overlay = caption_overlay("HH", 120, 60, font_size=40, font_color=(255, 0, 0, 255))
        colors = {px for px in overlay.getdata() if px[3] == 255}
        assert (255, 0, 0, 255) in colors


class TestPatternCaptionOverlay:
    def test_tile_and_full_size(self):
        meta = ImageMetadata(width=400, height=400)

        tile = caption_tile("SAMPLE", 25, meta)
        overlay = pattern_caption_overlay("SAMPLE", 25, meta)

        assert tile.size == (200, 200)
        assert _alpha_bbox(tile) is not None
        assert overlay.size == (400, 400)
        # 4개 타일이 같은 그림으로 반복된다
        assert overlay.crop((0, 0, 200, 200)).tobytes() == tile.tobytes()
        assert overlay.crop((200, 200, 400, 400)).tobytes() == tile.tobytes()

    def test_text_is_centered_in_tile(self):
        tile = caption_tile("SAMPLE", 25, ImageMetadata(width=400, height=400))
        left, top, right, bottom = _alpha_bbox(tile)

        assert abs((left + right) / 2 - 100) <= 6
        assert abs((top + bottom) / 2 - 100) <= 6

    def test_degenerate_ratio(self):
        overlay = pattern_caption_overlay("SAMPLE", -1, ImageMetadata(width=50, height=50))
        assert overlay.size == (50, 50)
        assert _alpha_bbox(overlay) is None


class TestProduceOverlay:
    def test_target_size_is_clamped_to_source(self):
        meta = ImageMetadata(width=200, height=100)

        assert target_size(meta, WatermarkOptions()) == (200, 100)
        assert target_size(meta, WatermarkOptions(width=500, height=50)) == (200, 50)

    def test_caption_uses_clamped_size(self):
        meta = ImageMetadata(width=200, height=100)
        overlay = produce_overlay(meta, WatermarkOptions(text="hi", width=500, height=40))

        assert overlay.size == (200, 40)

    def test_pattern_variants_cover_source(self, make_overlay):
        meta = ImageMetadata(width=120, height=90)
        path = make_overlay(20, 20)

        caption = produce_overlay(meta, WatermarkOptions(text="x", pattern=True))
        image = produce_overlay(meta, WatermarkOptions(overlay_path=path, pattern=True))

        assert caption.size == (120, 90)
        assert image.size == (120, 90)

    def test_single_image_variant(self, make_overlay):
        meta = ImageMetadata(width=100, height=100)
        path = make_overlay(80, 20)

        overlay = produce_overlay(meta, WatermarkOptions(overlay_path=path))

        assert overlay.size == (50, 20)
