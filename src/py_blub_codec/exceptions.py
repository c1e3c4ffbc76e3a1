"""BLUB 编解码异常处理模块。

定义统一的异常类、异常转换装饰器和转换结果错误处理器。
"""

import zlib
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError
from pydantic import ValidationError as PydanticValidationError

from .models.conversion_result import ConversionResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class BlubError(Exception):
    """编解码错误基类"""

    def __init__(self, message: str, section: str | None = None):
        super().__init__(message)
        self.message = message
        self.section = section


class FormatError(BlubError):
    """文件头或载荷格式错误"""

    pass


class StreamError(BlubError):
    """字节流读写错误，包括压缩流失败"""

    def __init__(
        self,
        message: str,
        section: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ):
        super().__init__(message, section)
        self.expected = expected
        self.actual = actual

    @classmethod
    def short_read(cls, section: str, expected: int, actual: int) -> "StreamError":
        return cls(
            MessageFormatter.short_read(section, expected, actual),
            section,
            expected,
            actual,
        )

    @classmethod
    def short_write(cls, section: str, expected: int, actual: int) -> "StreamError":
        return cls(
            MessageFormatter.short_write(section, expected, actual),
            section,
            expected,
            actual,
        )


class SizeError(BlubError):
    """图像尺寸超出格式上限"""

    pass


class ValidationError(BlubError):
    """编码选项验证错误"""

    pass


class UnsupportedFormatError(BlubError):
    """无法识别的输入图像格式"""

    pass


def handle_codec_errors(operation_name: str = "BLUB 编解码"):
    """将第三方异常统一转换为 BlubError 的装饰器

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except BlubError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation_name} - 无法识别图像格式: {e}")
                raise UnsupportedFormatError(f"不支持的图像格式: {e}") from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise SizeError(f"图像像素数超出安全限制: {e}") from e
            except zlib.error as e:
                logger.error(f"{operation_name} - 压缩流错误: {e}")
                raise StreamError(f"压缩流错误: {e}") from e
            except OSError as e:
                logger.error(f"{operation_name} - 文件操作失败: {e}")
                raise StreamError(f"文件操作失败: {e}") from e
            except PydanticValidationError as e:
                logger.error(f"{operation_name} - 选项无效: {e}")
                raise ValidationError(f"选项无效: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """转换错误处理器

    把异常记录到日志并折叠为失败的 ConversionResult。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def _create_error_result(
        input_path: Path, error_msg: str, output_path: Path | None = None
    ) -> ConversionResult:
        try:
            input_size = input_path.stat().st_size if input_path.exists() else 0
        except OSError:
            input_size = 0

        return ConversionResult(
            input_path=input_path,
            output_path=output_path,
            input_size=input_size,
            success=False,
            error=error_msg,
        )

    @staticmethod
    def handle_with_context(
        error: Exception,
        input_path: Path,
        operation: str = "未知操作",
        output_path: Path | None = None,
        log_level: str = "error",
    ) -> ConversionResult:
        """记录错误并返回失败结果

        Args:
            error: 异常对象
            input_path: 输入文件路径
            operation: 操作名称
            output_path: 输出文件路径（可选）
            log_level: 日志级别 ("error", "warning", "debug")

        Returns:
            ConversionResult: 失败的转换结果
        """
        ErrorHandler._log_error(operation, input_path, error, log_level)
        return ErrorHandler._create_error_result(
            input_path=input_path,
            error_msg=f"{operation}: {error}",
            output_path=output_path,
        )

    @staticmethod
    def handle_conversion_error(
        error: Exception,
        input_path: Path,
        operation: str = "格式转换",
        output_path: Path | None = None,
    ) -> ConversionResult:
        """按异常类型分发日志级别"""
        match error:
            case ValidationError() | UnsupportedFormatError() | FileNotFoundError():
                return ErrorHandler.handle_with_context(
                    error, input_path, operation, output_path, log_level="warning"
                )
            case FormatError() as fe:
                return ErrorHandler.handle_with_context(
                    fe, input_path, f"{operation} - 格式错误", output_path
                )
            case StreamError() | OSError():
                return ErrorHandler.handle_with_context(
                    error, input_path, f"{operation} - 读写错误", output_path
                )
            case _:
                return ErrorHandler.handle_with_context(
                    error, input_path, operation, output_path
                )
