"""文件头编解码模块。

32 字节固定布局：
    0-3   格式标签 "BLUB"（大端序）
    4-5   宽度      u16 小端序
    6-7   高度      u16 小端序
    8-11  alpha 区段长度 u32 小端序，0 表示没有遮罩
    12-15 像素区段长度   u32 小端序，0 表示统一色相
    16    色相偏移  u8
    17    标志位    bit 7 游程遮罩，bit 6 排除透明像素
    18-31 保留，写入为 0，读取时忽略
"""

import struct
from typing import BinaryIO

from ..exceptions import FormatError, SizeError, StreamError
from ..models.constants import BlubFormat
from ..models.image_options import ImageConfig, ImageOptions
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

_TAG = struct.Struct(BlubFormat.TAG_STRUCT)
_FIELDS = struct.Struct(BlubFormat.FIELDS_STRUCT)


def check_dimensions(width: int, height: int) -> None:
    """宽高不得超过 65535

    Raises:
        SizeError: 尺寸超出上限
    """
    if width > BlubFormat.MAX_DIMENSION or height > BlubFormat.MAX_DIMENSION:
        raise SizeError(
            MessageFormatter.image_too_large(width, height, BlubFormat.MAX_DIMENSION)
        )


def pack_header(
    width: int,
    height: int,
    alpha_length: int,
    pixel_length: int,
    hue_shift: int,
    flags: int,
) -> bytes:
    """生成 32 字节文件头"""
    check_dimensions(width, height)

    header = _TAG.pack(BlubFormat.FORMAT_TAG) + _FIELDS.pack(
        width, height, alpha_length, pixel_length, hue_shift, int(flags)
    )
    return header


def unpack_header(data: bytes) -> ImageConfig:
    """解析文件头

    Raises:
        FormatError: 字节不足 32 或格式标签不匹配
    """
    if len(data) < BlubFormat.HEADER_SIZE:
        raise FormatError(
            f"文件头长度不足: 需要 {BlubFormat.HEADER_SIZE} 字节，实际 {len(data)} 字节",
            "文件头",
        )

    (tag,) = _TAG.unpack_from(data, 0)
    if tag != BlubFormat.FORMAT_TAG:
        raise FormatError(f"无效的格式标签: {tag:#010x}", "文件头")

    width, height, alpha_length, pixel_length, hue_shift, flags = _FIELDS.unpack_from(
        data, _TAG.size
    )

    return ImageConfig(
        options=ImageOptions.from_header(hue_shift, flags, alpha_length, pixel_length),
        width=width,
        height=height,
        alpha_length=alpha_length,
        pixel_length=pixel_length,
    )


def read_config(stream: BinaryIO) -> ImageConfig:
    """从流中读取恰好 32 字节并解析"""
    data = bytearray()
    try:
        while len(data) < BlubFormat.HEADER_SIZE:
            chunk = stream.read(BlubFormat.HEADER_SIZE - len(data))
            if not chunk:
                break
            data += chunk
    except OSError as e:
        raise StreamError(
            MessageFormatter.operation_failed("读取文件头", "stream", e), "文件头"
        ) from e

    config = unpack_header(bytes(data))
    logger.debug(
        f"解析文件头: {config.width}x{config.height}, "
        f"alpha={config.alpha_length}, pixel={config.pixel_length}"
    )
    return config
