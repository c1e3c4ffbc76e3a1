"""数据模型包。

定义 BLUB 编解码相关的常量、选项和结果模型。
"""

from .constants import (
    FULL_LUMA,
    BlubFormat,
    HeaderFlag,
    LumaWeights,
    RunLength,
)
from .conversion_result import BaseResult, ConversionResult
from .image_options import ImageConfig, ImageOptions


__all__ = [
    "FULL_LUMA",
    "BaseResult",
    "BlubFormat",
    "ConversionResult",
    "HeaderFlag",
    "ImageConfig",
    "ImageOptions",
    "LumaWeights",
    "RunLength",
]
