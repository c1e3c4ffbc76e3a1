"""测试配置文件。

提供测试所需的图像 fixtures 和编码辅助函数。
"""

import io
import tempfile
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def make_gradient(width: int, height: int) -> Image.Image:
    """RGBA 渐变图：颜色随坐标变化，alpha 在 0-255 间循环"""
    y, x = np.mgrid[0:height, 0:width]
    pixels = np.stack(
        [(x * 37) % 256, (y * 53) % 256, (x * y * 11) % 256, ((x + y) * 29) % 256],
        axis=-1,
    ).astype(np.uint8)
    return Image.fromarray(pixels)


def pixels_of(image: Image.Image) -> list[tuple[int, ...]]:
    """按行优先展开的 RGBA 像素列表"""
    array = np.asarray(image.convert("RGBA")).reshape(-1, 4)
    return [tuple(int(c) for c in px) for px in array]


def encode_to_bytes(image: Image.Image, **option_fields) -> bytes:
    """编码为内存中的 BLUB 字节"""
    from py_blub_codec import ImageOptions, encode

    buffer = io.BytesIO()
    encode(buffer, image, ImageOptions(**option_fields))
    return buffer.getvalue()


def decode_bytes(data: bytes) -> Image.Image:
    """从内存字节解码 BLUB"""
    from py_blub_codec import decode

    return decode(io.BytesIO(data))


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def gradient_image() -> Image.Image:
    """带透明度的渐变图"""
    return make_gradient(23, 17)


@pytest.fixture
def opaque_image() -> Image.Image:
    """不透明 RGB 图"""
    img = Image.new("RGB", (16, 9), color=(30, 140, 200))
    img.putpixel((3, 4), (250, 10, 10))
    return img


@pytest.fixture
def sample_png(temp_dir: Path, gradient_image: Image.Image) -> Path:
    """写入磁盘的 PNG 素材"""
    path = temp_dir / "sample.png"
    gradient_image.save(path, "PNG")
    return path
