"""BLUB 容器编解码模块。

编码: 颜色变换 → alpha 遮罩 + 像素区段 → 文件头 → 写入文件头，再经 zlib 写入两个区段
解码: 读取文件头 → 经 zlib 读取两个区段 → 逐像素还原颜色
"""

from dataclasses import dataclass
from typing import BinaryIO

import numpy as np
from PIL import Image

from ..config import get_config
from ..models.constants import OPAQUE_ALPHA, TRANSPARENT_ALPHA, LumaWeights
from ..models.image_options import ImageConfig, ImageOptions
from ..utils.logging_helpers import get_logger
from .alpha_mask import decode_alpha_mask, encode_alpha_mask
from .color import hue_palette
from .header import check_dimensions, pack_header, read_config
from .pixel_samples import decode_samples, encode_samples
from .streams import DeflateReader, DeflateWriter, write_exact


logger = get_logger()

ALPHA_SECTION = "alpha 遮罩"
PIXEL_SECTION = "像素数据"


@dataclass
class GrayscaleFrame:
    """编码中间结果：逐像素亮度与不透明标志（行优先展开）"""

    width: int
    height: int
    luma: np.ndarray
    mask: np.ndarray

    @property
    def opaque(self) -> bool:
        """是否所有像素都不透明"""
        return bool(self.mask.all())


def format_image(image: Image.Image, options: ImageOptions) -> GrayscaleFrame:
    """把图像折算为亮度与不透明标志

    无法转换为 RGBA 的图像按全透明、亮度 0 处理。
    未启用 alpha 遮罩时所有像素视为不透明。
    """
    width, height = image.size
    count = width * height

    try:
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    except (ValueError, OSError) as e:
        logger.warning(f"无法将 {image.mode} 模式转换为 RGBA，按全透明处理: {e}")
        return GrayscaleFrame(
            width=width,
            height=height,
            luma=np.zeros(count, dtype=np.uint8),
            mask=np.full(count, not options.use_alpha_mask, dtype=bool),
        )

    pixels = np.frombuffer(rgba.tobytes(), dtype=np.uint8).reshape(-1, 4)
    channels = pixels.astype(np.uint32)
    weighted = (
        channels[:, 0] * LumaWeights.RED
        + channels[:, 1] * LumaWeights.GREEN
        + channels[:, 2] * LumaWeights.BLUE
    )
    total = LumaWeights.total()
    luma = ((weighted + total // 2) // total).astype(np.uint8)

    if options.use_alpha_mask:
        mask = pixels[:, 3] > options.alpha_threshold
    else:
        mask = np.ones(count, dtype=bool)

    return GrayscaleFrame(width=width, height=height, luma=luma, mask=mask)


def build_sections(frame: GrayscaleFrame, options: ImageOptions) -> tuple[bytes, bytes]:
    """生成 (alpha 区段, 像素区段)，全不透明时省略 alpha 区段"""
    alpha_data = (
        b"" if frame.opaque else encode_alpha_mask(frame.mask, options.compress_alpha_mask)
    )
    pixel_data = (
        b"" if options.uniform_hue else encode_samples(frame.luma, frame.mask, options)
    )
    return alpha_data, pixel_data


def encode(
    stream: BinaryIO, image: Image.Image, options: ImageOptions | None = None
) -> None:
    """把图像编码为 BLUB 写入流

    Args:
        stream: 可写字节流
        image: Pillow 图像，任意模式
        options: 编码选项，默认 ImageOptions()

    Raises:
        SizeError: 宽或高超过 65535（写入任何字节之前）
        StreamError: 写入失败
    """
    options = options or ImageOptions()
    width, height = image.size
    check_dimensions(width, height)

    frame = format_image(image, options)
    alpha_data, pixel_data = build_sections(frame, options)

    header = pack_header(
        width,
        height,
        len(alpha_data),
        len(pixel_data),
        options.hue_shift,
        options.flags,
    )
    write_exact(stream, header, "文件头")

    with DeflateWriter(stream, get_config().codec.COMPRESS_LEVEL) as writer:
        if alpha_data:
            writer.write(alpha_data, ALPHA_SECTION)
        if pixel_data:
            writer.write(pixel_data, PIXEL_SECTION)

    logger.debug(
        f"BLUB 编码完成: {width}x{height}, alpha={len(alpha_data)}, "
        f"pixel={len(pixel_data)}, opaque={frame.opaque}"
    )


def decode_config(stream: BinaryIO) -> ImageConfig:
    """只读取并校验文件头"""
    return read_config(stream)


def decode(stream: BinaryIO) -> Image.Image:
    """解码完整的 BLUB 图像，返回 RGBA 模式的 Pillow 图像"""
    config = decode_config(stream)
    return decode_payload(stream, config)


def decode_payload(stream: BinaryIO, config: ImageConfig) -> Image.Image:
    """在文件头之后读取压缩区段并还原图像"""
    options = config.options
    alpha_data = b""
    pixel_data = b""

    if options.use_alpha_mask or not options.uniform_hue:
        chunk_size = get_config().codec.READ_CHUNK_SIZE
        with DeflateReader(stream, chunk_size) as reader:
            if options.use_alpha_mask:
                alpha_data = reader.read_exact(config.alpha_length, ALPHA_SECTION)
            if not options.uniform_hue:
                pixel_data = reader.read_exact(config.pixel_length, PIXEL_SECTION)

    return build_raster(config, alpha_data, pixel_data)


def build_raster(config: ImageConfig, alpha_data: bytes, pixel_data: bytes) -> Image.Image:
    """由两个已解压区段还原 RGBA 图像"""
    options = config.options
    count = config.width * config.height

    if options.use_alpha_mask:
        mask = decode_alpha_mask(alpha_data, count, options.compress_alpha_mask)
    else:
        mask = np.ones(count, dtype=bool)

    luma = decode_samples(pixel_data, mask, options)

    rgba = np.empty((count, 4), dtype=np.uint8)
    rgba[:, :3] = hue_palette(options.hue_shift)[luma]
    # 被遮罩的像素输出未着色的灰度
    masked = ~mask
    rgba[masked, :3] = luma[masked, None]
    rgba[:, 3] = np.where(mask, OPAQUE_ALPHA, TRANSPARENT_ALPHA)

    raster = Image.new("RGBA", (config.width, config.height))
    if count:
        raster.frombytes(rgba.tobytes())
    return raster
