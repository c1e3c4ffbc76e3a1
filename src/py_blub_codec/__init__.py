"""BLUB 灰度 + 色相图像编解码库。

单亮度通道加全局色相的栅格格式，可选透明遮罩，载荷经 zlib 压缩。
导入本包即向 Pillow 注册 BLUB 格式。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "BLUB 灰度色相图像编解码器，基于 Pillow"

from . import plugin  # noqa: F401  注册 Pillow 插件
from .converter import BlubConverter
from .core.container import decode, decode_config, decode_payload, encode
from .exceptions import (
    BlubError,
    FormatError,
    SizeError,
    StreamError,
    UnsupportedFormatError,
    ValidationError,
)
from .models import ConversionResult, ImageConfig, ImageOptions


__all__ = [
    "BlubConverter",
    "BlubError",
    "ConversionResult",
    "FormatError",
    "ImageConfig",
    "ImageOptions",
    "SizeError",
    "StreamError",
    "UnsupportedFormatError",
    "ValidationError",
    "decode",
    "decode_config",
    "decode_payload",
    "encode",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
