"""BLUB 格式常量定义。

文件头布局、标志位、亮度权重等格式契约集中在此处，避免散落的魔数。
"""

from enum import IntEnum, IntFlag
from typing import Final


class BlubFormat:
    """容器格式的固定参数"""

    # "BLUB" 按大端序存放在文件头前 4 字节
    TAG_BYTES: Final[bytes] = b"BLUB"
    FORMAT_TAG: Final[int] = int.from_bytes(TAG_BYTES, "big")

    HEADER_SIZE: Final[int] = 32

    # 大端序标签 + 小端序数值字段，混合字节序属于格式契约
    TAG_STRUCT: Final[str] = ">I"
    FIELDS_STRUCT: Final[str] = "<HHIIBB14x"

    MAX_DIMENSION: Final[int] = 0xFFFF
    MAX_SECTION_LENGTH: Final[int] = 0xFFFFFFFF

    # Pillow 注册信息
    FORMAT_ID: Final[str] = "BLUB"
    EXTENSION: Final[str] = ".blub"
    MIME_TYPE: Final[str] = "image/x-blub"


class HeaderFlag(IntFlag):
    """文件头第 17 字节的标志位"""

    NONE = 0
    COMPRESS_ALPHA = 0b1000_0000
    EXCLUDE_MASKED_PIXELS = 0b0100_0000


class LumaWeights(IntEnum):
    """整数亮度权重，总和 1000"""

    RED = 299
    GREEN = 587
    BLUE = 114

    @classmethod
    def total(cls) -> int:
        return cls.RED + cls.GREEN + cls.BLUE


class RunLength:
    """Alpha 遮罩游程编码参数"""

    VALUE_BIT: Final[int] = 0b1000_0000
    LENGTH_MASK: Final[int] = 0b0111_1111
    MAX_RUN: Final[int] = 127


# 统一常量
FULL_LUMA: Final[int] = 0xFF
OPAQUE_ALPHA: Final[int] = 0xFF
TRANSPARENT_ALPHA: Final[int] = 0
HUE_STEPS: Final[int] = 256
