"""워터마크 요청 옵션과 이미지 메타데이터."""

import math
import re
from dataclasses import dataclass
from enum import Enum

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from core.config import settings
from core.exceptions import InvalidOptions

DEFAULT_FONT = "monospace"
DEFAULT_FONT_SIZE = 48
DEFAULT_FONT_COLOR = "rgba(255, 255, 255, 0.7)"
DEFAULT_RATIO = 25.0

# CSS 스타일 rgba(): 알파는 0~1 실수
_RGBA_RE = re.compile(
    r"^rgba\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*([0-9]*\.?[0-9]+)\s*\)$"
)

RGBA = tuple[int, int, int, int]


def parse_color(value: str | tuple | list) -> RGBA:
    """색상 표현을 (r, g, b, a) 튜플로 바꾼다.

    지원: "rgba(255, 255, 255, 0.7)", "rgb(...)", "#rrggbb[aa]", 색상 이름, (r, g, b[, a]).
    """
    if isinstance(value, (tuple, list)):
        if len(value) not in (3, 4):
            raise ValueError(f"invalid color: {value!r}")
        r, g, b, *rest = (int(v) for v in value)
        return (r, g, b, rest[0] if rest else 255)

    if not isinstance(value, str):
        raise ValueError(f"invalid color: {value!r}")

    match = _RGBA_RE.match(value.strip().lower())
    if match:
        r, g, b = (int(match.group(i)) for i in (1, 2, 3))
        alpha = min(max(float(match.group(4)), 0.0), 1.0)
        return (r, g, b, round(alpha * 255))

    return ImageColor.getcolor(value, "RGBA")


def _truncate(v):
    """숫자(또는 숫자 문자열)의 소수부를 버린다. 120.5 → 120, "0" → 0."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        if not v.strip():
            return None
        try:
            v = float(v)
        except ValueError:
            return v
    if isinstance(v, float):
        if not math.isfinite(v):
            raise ValueError(f"invalid number: {v!r}")
        return int(v)
    return v


class FontDescriptor(BaseModel):
    """{family, name} 형태의 폰트 지정. name이 있으면 name을 우선한다."""

    family: str
    name: str | None = None

    @property
    def resolved(self) -> str:
        return self.name or self.family


class WatermarkOptions(BaseModel):
    """워터마크 요청 옵션.

    camelCase(overlayPath, fontSize ...)와 snake_case 이름을 모두 받는다.
    0이나 빈 값은 "지정하지 않음"으로 보고 기본값을 쓴다.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    overlay_path: str | None = None
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)
    text: str = ""
    font: str | FontDescriptor = DEFAULT_FONT
    font_size: int = Field(default=DEFAULT_FONT_SIZE, ge=1)
    font_color: RGBA = parse_color(DEFAULT_FONT_COLOR)
    pattern: bool = False
    ratio: float = DEFAULT_RATIO
    format: str = Field(default_factory=lambda: settings.DEFAULT_FORMAT.lower())
    config_path: str | None = None

    @field_validator("overlay_path", "config_path", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if v in ("", 0, "0"):
            return None
        return v

    @field_validator("width", "height", mode="before")
    @classmethod
    def _truncate_size(cls, v):
        v = _truncate(v)
        return v or None

    @field_validator("text", mode="before")
    @classmethod
    def _text_default(cls, v):
        return "" if v is None else v

    @field_validator("font", mode="before")
    @classmethod
    def _font_default(cls, v):
        # 객체인데 family가 없으면 기본 폰트
        if isinstance(v, dict) and not v.get("family"):
            return DEFAULT_FONT
        return v or DEFAULT_FONT

    @field_validator("font_size", mode="before")
    @classmethod
    def _font_size_default(cls, v):
        return _truncate(v) or DEFAULT_FONT_SIZE

    @field_validator("ratio", mode="before")
    @classmethod
    def _ratio_default(cls, v):
        return v if v not in (None, "", 0, "0") else DEFAULT_RATIO

    @field_validator("font_color", mode="before")
    @classmethod
    def _parse_font_color(cls, v):
        return parse_color(v or DEFAULT_FONT_COLOR)

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v):
        return (v or settings.DEFAULT_FORMAT).lower()

    @property
    def font_family(self) -> str:
        if isinstance(self.font, FontDescriptor):
            return self.font.resolved
        return self.font


@dataclass(frozen=True)
class ImageMetadata:
    """디코딩한 원본 이미지의 크기/포맷. 읽은 뒤에는 바뀌지 않는다."""

    width: int
    height: int
    format: str | None = None

    @property
    def area(self) -> int:
        return self.width * self.height


class OverlayVariant(Enum):
    SINGLE_IMAGE = "single_image"
    TILED_IMAGE = "tiled_image"
    SINGLE_CAPTION = "single_caption"
    TILED_CAPTION = "tiled_caption"

    @classmethod
    def from_options(cls, options: WatermarkOptions) -> "OverlayVariant":
        match (bool(options.overlay_path), options.pattern):
            case (True, True):
                return cls.TILED_IMAGE
            case (True, False):
                return cls.SINGLE_IMAGE
            case (False, True):
                return cls.TILED_CAPTION
            case _:
                return cls.SINGLE_CAPTION


def load_options(raw: WatermarkOptions | dict | str | None) -> WatermarkOptions:
    """dict/JSON 문자열을 WatermarkOptions로 검증한다. 실패하면 InvalidOptions."""
    if isinstance(raw, WatermarkOptions):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return WatermarkOptions.model_validate_json(raw or "{}")
        return WatermarkOptions.model_validate(raw or {})
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidOptions(f"워터마크 옵션이 올바르지 않습니다 ({errors})") from e
