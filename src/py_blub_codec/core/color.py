"""颜色变换模块。

编码时把任意颜色折算为单字节亮度 + 不透明标志，
解码时根据亮度、不透明标志和全局色相还原 RGBA。
"""

import colorsys
from numbers import Integral
from typing import Any

import numpy as np
from PIL import ImageColor

from ..models.constants import (
    OPAQUE_ALPHA,
    TRANSPARENT_ALPHA,
    LumaWeights,
)
from ..models.image_options import ImageOptions


RGBA = tuple[int, int, int, int]


def _channel(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        return None
    return int(value) if 0 <= value <= 0xFF else None


def to_rgba(color: Any) -> RGBA | None:
    """把颜色转换为 8 位 RGBA，无法转换时返回 None

    支持的表示：
    - int: 灰度 (L)
    - 长度 1/2/3/4 的序列: L / LA / RGB / RGBA
    - Pillow 颜色字符串: "#ff0000"、"red"、"hsv(0, 100%, 100%)" 等
    """
    match color:
        case str():
            try:
                r, g, b, a = ImageColor.getcolor(color, "RGBA")
            except ValueError:
                return None
            return r, g, b, a
        case Integral():
            channels = [color, color, color, OPAQUE_ALPHA]
        case (lum,):
            channels = [lum, lum, lum, OPAQUE_ALPHA]
        case (lum, alpha):
            channels = [lum, lum, lum, alpha]
        case (r, g, b):
            channels = [r, g, b, OPAQUE_ALPHA]
        case (r, g, b, a):
            channels = [r, g, b, a]
        case _:
            return None

    checked = [_channel(c) for c in channels]
    if any(c is None for c in checked):
        return None
    return checked[0], checked[1], checked[2], checked[3]


def luma_of(red: int, green: int, blue: int) -> int:
    """整数亮度，四舍五入"""
    total = LumaWeights.total()
    weighted = (
        red * LumaWeights.RED + green * LumaWeights.GREEN + blue * LumaWeights.BLUE
    )
    return (weighted + total // 2) // total


def color_to_gray(color: Any, threshold: int) -> tuple[int, bool]:
    """颜色 → (亮度, 是否不透明)

    alpha 必须严格大于阈值才算不透明。无法转换的颜色视为透明黑色。
    """
    rgba = to_rgba(color)
    if rgba is None:
        return 0, False

    r, g, b, a = rgba
    return luma_of(r, g, b), a > threshold


def _shade(luma: int, hue: float) -> tuple[int, int, int]:
    if hue == 0:
        # 色相为 0 时直接输出灰度，避免 HSV 往返的舍入误差
        return luma, luma, luma

    rgb = colorsys.hsv_to_rgb(hue / 360, 1.0, luma / 0xFF)
    r, g, b = (int(c * 0xFF + 0.5) for c in rgb)
    return r, g, b


def gray_to_color(luma: int, opaque: bool, hue_shift: int) -> RGBA:
    """(亮度, 是否不透明, 色相偏移) → RGBA

    被遮罩的像素 alpha 为 0，RGB 固定为未着色的灰度值。
    """
    if not opaque:
        return luma, luma, luma, TRANSPARENT_ALPHA

    r, g, b = _shade(luma, ImageOptions.degrees_for(hue_shift))
    return r, g, b, OPAQUE_ALPHA


def hue_palette(hue_shift: int) -> np.ndarray:
    """不透明像素的调色表，第 l 行是亮度 l 的 RGB"""
    hue = ImageOptions.degrees_for(hue_shift)
    return np.array([_shade(luma, hue) for luma in range(256)], dtype=np.uint8)
