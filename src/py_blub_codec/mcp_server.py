"""BLUB 编解码 MCP 服务器。

提供三个工具：普通图像编码为 BLUB、BLUB 解码导出、查看 BLUB 文件头。
"""

import logging
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .converter import BlubConverter
from .exceptions import BlubError
from .models import ConversionResult
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPConversionResponse = dict[str, Any]
MCPBlubInfoResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果"""
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message, error_type="file", details=details
        )

    @staticmethod
    def codec_error(error: BlubError) -> dict[str, Any]:
        """构建编解码错误结果"""
        details = {"section": error.section} if error.section else None
        return MCPResponseBuilder.error(
            message=error.message,
            error_type=type(error).__name__,
            details=details,
        )

    @staticmethod
    def conversion(result: ConversionResult) -> dict[str, Any]:
        """把转换结果格式化为响应"""
        return {
            "success": result.success,
            "input_path": str(result.input_path),
            "output_path": str(result.output_path) if result.output_path else None,
            "input_size": result.input_size,
            "output_size": result.output_size,
            "format_used": result.format_used,
            "dimensions": list(result.dimensions) if result.dimensions else None,
            "alpha_length": result.alpha_length,
            "pixel_length": result.pixel_length,
            "summary": result.get_summary(),
            "error": result.error,
        }


# 配置日志
logging.basicConfig(
    level=get_config().logging.LOG_LEVEL, format=get_config().logging.LOG_FORMAT
)
logger = logging.getLogger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("BLUB 图像编解码服务")

# 全局转换器实例
converter = BlubConverter()


@mcp.tool()
def encode_blub(
    input_path: str,
    output_path: str | None = None,
    hue_shift: int = 0,
    alpha_threshold: int = 0,
    use_alpha_mask: bool = True,
    compress_alpha_mask: bool = True,
    uniform_hue: bool = False,
    exclude_masked_pixels: bool = False,
) -> MCPConversionResponse:
    """把 PNG/JPEG/WEBP 等图像编码为 BLUB 灰度色相格式

    Args:
        input_path: 输入图像路径
        output_path: 输出路径（默认与输入同名的 .blub）
        hue_shift: 全局色相 0-255（映射到 0-360°），0 为纯灰度
        alpha_threshold: alpha 大于该值的像素才算不透明
        use_alpha_mask: 是否保存透明遮罩
        compress_alpha_mask: 遮罩使用游程编码
        uniform_hue: 不保存亮度，输出纯色剪影
        exclude_masked_pixels: 透明像素不保存亮度

    Returns:
        dict: 转换结果
    """
    if not Path(input_path).exists():
        return MCPResponseBuilder.file_error(
            MessageFormatter.file_not_found(input_path), input_path
        )

    result = converter.to_blub(
        input_path,
        output_path,
        hue_shift=hue_shift,
        alpha_threshold=alpha_threshold,
        use_alpha_mask=use_alpha_mask,
        compress_alpha_mask=compress_alpha_mask,
        uniform_hue=uniform_hue,
        exclude_masked_pixels=exclude_masked_pixels,
    )
    return MCPResponseBuilder.conversion(result)


@mcp.tool()
def decode_blub(
    input_path: str,
    output_path: str | None = None,
    format: str | None = None,
) -> MCPConversionResponse:
    """把 BLUB 文件解码并导出为常见图像格式

    Args:
        input_path: BLUB 文件路径
        output_path: 输出路径（默认按格式替换扩展名）
        format: 导出格式，如 "PNG"、"WEBP"，默认 PNG

    Returns:
        dict: 转换结果
    """
    if not Path(input_path).exists():
        return MCPResponseBuilder.file_error(
            MessageFormatter.file_not_found(input_path), input_path
        )

    result = converter.from_blub(input_path, output_path, format)
    return MCPResponseBuilder.conversion(result)


@mcp.tool()
def get_blub_info(input_path: str) -> MCPBlubInfoResponse:
    """读取 BLUB 文件头信息

    Args:
        input_path: BLUB 文件路径

    Returns:
        dict: 尺寸、区段长度与编码选项
    """
    try:
        config = converter.inspect(input_path)
    except BlubError as e:
        logger.error(MessageFormatter.operation_failed("读取文件头", input_path, e))
        return MCPResponseBuilder.codec_error(e)

    return {
        "success": True,
        "file_path": input_path,
        "width": config.width,
        "height": config.height,
        "total_pixels": config.pixel_count,
        "alpha_length": config.alpha_length,
        "pixel_length": config.pixel_length,
        "payload_size_human": config.get_payload_size_human(),
        "options": config.options.model_dump(),
        "hue_degrees": config.options.hue_degrees,
    }


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动 BLUB 编解码 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
