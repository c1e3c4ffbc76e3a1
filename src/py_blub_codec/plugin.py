"""Pillow 插件模块。

注册 BLUB 格式，使 Image.open("x.blub") 与 img.save("x.blub") 可用。
保存参数与 ImageOptions 字段同名，也可以直接传 options=ImageOptions(...)。
"""

from typing import IO, Any

from PIL import Image, ImageFile
from pydantic import ValidationError as PydanticValidationError

from .core.container import decode_payload, encode
from .core.header import read_config
from .exceptions import FormatError, ValidationError
from .models.constants import BlubFormat
from .models.image_options import ImageOptions
from .utils.logging_helpers import get_logger


logger = get_logger()


def _accept(prefix: bytes) -> bool:
    return prefix[:4] == BlubFormat.TAG_BYTES


class BlubImageFile(ImageFile.ImageFile):
    """BLUB 图像文件，解码结果为 RGBA"""

    format = BlubFormat.FORMAT_ID
    format_description = "BLUB grayscale + hue raster"

    def _open(self) -> None:
        try:
            config = read_config(self.fp)
        except FormatError as e:
            # Pillow 以 SyntaxError 表示“不是本格式”
            raise SyntaxError(e.message) from e

        self.blub_config = config
        self._mode = "RGBA"
        self._size = (config.width, config.height)
        self.info["hue_shift"] = config.options.hue_shift
        self.info["uniform_hue"] = config.options.uniform_hue
        self.tile = [
            (BlubFormat.FORMAT_ID, (0, 0) + self.size, self.fp.tell(), config)
        ]


class BlubDecoder(ImageFile.PyDecoder):
    """从文件头之后的位置读取整个载荷"""

    _pulls_fd = True

    def decode(self, buffer: bytes | Any) -> tuple[int, int]:
        del buffer
        (config,) = self.args
        raster = decode_payload(self.fd, config)
        self.set_as_raw(raster.tobytes())
        return -1, 0


def _options_from_encoderinfo(encoderinfo: dict[str, Any]) -> ImageOptions:
    options = encoderinfo.get("options")
    if isinstance(options, ImageOptions):
        return options

    fields = {
        key: value
        for key, value in encoderinfo.items()
        if key in ImageOptions.model_fields
    }
    try:
        return ImageOptions(**fields)
    except PydanticValidationError as e:
        raise ValidationError(f"BLUB 保存参数无效: {e}") from e


def _save(im: Image.Image, fp: IO[bytes], filename: str | bytes) -> None:
    options = _options_from_encoderinfo(im.encoderinfo)
    logger.debug(f"通过 Pillow 保存 BLUB: {filename!r}")
    encode(fp, im, options)


Image.register_open(BlubImageFile.format, BlubImageFile, _accept)
Image.register_save(BlubImageFile.format, _save)
Image.register_extension(BlubImageFile.format, BlubFormat.EXTENSION)
Image.register_mime(BlubImageFile.format, BlubFormat.MIME_TYPE)
Image.register_decoder(BlubFormat.FORMAT_ID, BlubDecoder)
