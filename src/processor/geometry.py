"""패턴 타일 기하 계산과 회전/반복 배치.

타일 한 장은 원본 면적의 ratio% 를 덮는 diagonal × diagonal 캔버스다.
그 안에 한 변이 side(= diagonal / √2)인 정사각형을 -45° 회전해 넣으면
정사각형의 네 꼭짓점이 캔버스 각 변의 중점에 정확히 닿는다.
"""

import math
from dataclasses import dataclass

from PIL import Image

from model.options import ImageMetadata


@dataclass(frozen=True)
class TileGeometry:
    diagonal: int
    side: float


def compute_tile(meta: ImageMetadata, ratio: float) -> TileGeometry:
    """원본 면적과 ratio(%)로 타일 크기를 구한다.

    ratio가 0 이하이면 크기 0인 타일(아무것도 그리지 않음)이 된다.
    """
    area = meta.width * meta.height * ratio / 100
    diagonal = int(math.sqrt(area)) if area > 0 else 0
    side = math.sqrt(diagonal**2 / 2)
    return TileGeometry(diagonal=diagonal, side=side)


def diagonal_tile(
    layer: Image.Image, diagonal: int, offset: float = 0.0
) -> Image.Image:
    """layer를 (0, diagonal/2)로 옮긴 원점 기준 -45° 회전해 diagonal × diagonal 캔버스에 그린다.

    offset은 layer 안에서 원점이 놓인 위치다. 원점 바깥(음수 좌표)까지 그려진
    내용도 잘리지 않도록 layer에 여백을 두었을 때 사용한다.
    """
    # 출력 (X, Y) → 입력 (x, y) 역변환: 회전 +45°, 이동 (0, -diagonal/2)
    c = math.sqrt(2) / 2
    half = diagonal / 2
    data = (c, -c, c * half + offset, c, c, -c * half + offset)
    return layer.transform(
        (diagonal, diagonal),
        Image.Transform.AFFINE,
        data,
        resample=Image.Resampling.BICUBIC,
    )


def fill_pattern(tile: Image.Image, size: tuple[int, int]) -> Image.Image:
    """tile을 (0, 0)부터 가로/세로로 반복해 size 크기 캔버스를 채운다."""
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    tile_w, tile_h = tile.size
    if tile_w <= 0 or tile_h <= 0:
        return canvas

    for y in range(0, size[1], tile_h):
        for x in range(0, size[0], tile_w):
            canvas.paste(tile, (x, y))
    return canvas
