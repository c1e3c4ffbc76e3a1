"""BLUB 文件转换器接口。

基于核心编解码器的文件级接口：普通图像 ↔ BLUB，以及 BLUB 文件头查看。
"""

from pathlib import Path
from typing import Any

from PIL import Image

from .config import get_config
from .core.container import decode_config, decode_payload, encode
from .exceptions import ErrorHandler, ValidationError, handle_codec_errors
from .models import ConversionResult, ImageConfig, ImageOptions
from .models.constants import BlubFormat
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()

# 支持透明度的导出格式，其余格式导出前去掉 alpha
TRANSPARENCY_FORMATS = {"PNG", "WEBP", "GIF", "TIFF", BlubFormat.FORMAT_ID}

PREFERRED_EXTENSIONS = {
    "JPEG": ".jpg",
    "TIFF": ".tiff",
}


def get_extension(format_name: str) -> str:
    """获取格式的首选扩展名"""
    format_upper = format_name.upper()
    if format_upper in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[format_upper]

    for ext, fmt in Image.registered_extensions().items():
        if fmt and fmt.upper() == format_upper:
            return ext.lower()

    return f".{format_upper.lower()}"


class BlubConverter:
    """BLUB 文件转换器

    所有公开方法都返回 ConversionResult，错误折叠进结果而不是抛出。
    """

    def __init__(self, default_output_format: str | None = None):
        """初始化转换器。

        Args:
            default_output_format: from_blub 默认导出格式，None 使用全局配置
        """
        self.default_output_format = (
            default_output_format or get_config().codec.DEFAULT_OUTPUT_FORMAT
        ).upper()

        if self.default_output_format not in Image.registered_extensions().values():
            raise ValidationError(
                MessageFormatter.validation_error(
                    "default_output_format", self.default_output_format, "Pillow 不支持"
                )
            )

    def to_blub(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        options: ImageOptions | None = None,
        **option_fields: Any,
    ) -> ConversionResult:
        """把普通图像转换为 BLUB。

        Args:
            input_path: 输入图像路径（Pillow 可读的任意格式）
            output_path: 输出路径，默认与输入同名的 .blub
            options: 编码选项
            **option_fields: 未提供 options 时按字段构建 ImageOptions

        Returns:
            ConversionResult: 转换结果

        Examples:
            >>> converter = BlubConverter()
            >>> result = converter.to_blub("sprite.png", hue_shift=135)
            >>> print(result.get_summary())
        """
        input_path = Path(input_path)
        output = Path(output_path) if output_path else input_path.with_suffix(
            BlubFormat.EXTENSION
        )

        try:
            if not input_path.exists():
                raise FileNotFoundError(MessageFormatter.file_not_found(input_path))
            return self._encode_file(input_path, output, options, option_fields)
        except Exception as e:
            return ErrorHandler.handle_conversion_error(
                e, input_path, "BLUB 编码", output
            )

    def from_blub(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        format: str | None = None,
    ) -> ConversionResult:
        """把 BLUB 解码并导出为普通图像格式。

        Args:
            input_path: BLUB 文件路径
            output_path: 输出路径，默认按导出格式替换扩展名
            format: 导出格式，默认使用 default_output_format

        Returns:
            ConversionResult: 转换结果
        """
        input_path = Path(input_path)
        target_format = (format or self.default_output_format).upper()
        output = Path(output_path) if output_path else input_path.with_suffix(
            get_extension(target_format)
        )

        try:
            if not input_path.exists():
                raise FileNotFoundError(MessageFormatter.file_not_found(input_path))
            return self._decode_file(input_path, output, target_format)
        except Exception as e:
            return ErrorHandler.handle_conversion_error(
                e, input_path, "BLUB 解码", output
            )

    @handle_codec_errors("读取 BLUB 文件头")
    def inspect(self, input_path: str | Path) -> ImageConfig:
        """读取 BLUB 文件头

        Raises:
            BlubError: 文件不存在、文件头无效等
        """
        with Path(input_path).open("rb") as fp:
            return decode_config(fp)

    @handle_codec_errors("BLUB 编码")
    def _encode_file(
        self,
        input_path: Path,
        output_path: Path,
        options: ImageOptions | None,
        option_fields: dict[str, Any],
    ) -> ConversionResult:
        options = options or ImageOptions(**option_fields)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with Image.open(input_path) as img:
            dimensions = img.size
            try:
                with output_path.open("wb") as fp:
                    encode(fp, img, options)
            except Exception:
                output_path.unlink(missing_ok=True)
                raise

        with output_path.open("rb") as fp:
            config = decode_config(fp)

        result = ConversionResult(
            input_path=input_path,
            output_path=output_path,
            input_size=input_path.stat().st_size,
            output_size=output_path.stat().st_size,
            success=True,
            format_used=BlubFormat.FORMAT_ID,
            dimensions=dimensions,
            alpha_length=config.alpha_length,
            pixel_length=config.pixel_length,
        )
        logger.info(f"BLUB 编码完成 {input_path}: {result.get_summary()}")
        return result

    @handle_codec_errors("BLUB 解码")
    def _decode_file(
        self, input_path: Path, output_path: Path, target_format: str
    ) -> ConversionResult:
        with input_path.open("rb") as fp:
            config = decode_config(fp)
            raster = decode_payload(fp, config)

        if target_format not in TRANSPARENCY_FORMATS:
            raster = raster.convert("RGB")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        if target_format == BlubFormat.FORMAT_ID:
            raster.save(output_path, format=target_format, options=config.options)
        else:
            raster.save(output_path, format=target_format)

        result = ConversionResult(
            input_path=input_path,
            output_path=output_path,
            input_size=input_path.stat().st_size,
            output_size=output_path.stat().st_size,
            success=True,
            format_used=target_format,
            dimensions=raster.size,
            alpha_length=config.alpha_length,
            pixel_length=config.pixel_length,
        )
        logger.info(f"BLUB 解码完成 {input_path}: {result.get_summary()}")
        return result
