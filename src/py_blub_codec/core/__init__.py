"""核心模块包。

BLUB 编解码核心：颜色变换、alpha 遮罩、像素区段、文件头和容器。
"""

from .alpha_mask import (
    RunLengthEncoder,
    RunState,
    decode_alpha_mask,
    decode_bitmask,
    decode_rle,
    encode_alpha_mask,
    encode_bitmask,
    encode_rle,
)
from .color import color_to_gray, gray_to_color, hue_palette, to_rgba
from .container import (
    GrayscaleFrame,
    build_raster,
    build_sections,
    decode,
    decode_config,
    decode_payload,
    encode,
    format_image,
)
from .header import pack_header, read_config, unpack_header
from .pixel_samples import decode_samples, encode_samples, inclusion_mask


__all__ = [
    "GrayscaleFrame",
    "RunLengthEncoder",
    "RunState",
    "build_raster",
    "build_sections",
    "color_to_gray",
    "decode",
    "decode_alpha_mask",
    "decode_bitmask",
    "decode_config",
    "decode_payload",
    "decode_rle",
    "decode_samples",
    "encode",
    "encode_alpha_mask",
    "encode_bitmask",
    "encode_rle",
    "encode_samples",
    "format_image",
    "gray_to_color",
    "hue_palette",
    "inclusion_mask",
    "pack_header",
    "read_config",
    "to_rgba",
    "unpack_header",
]
