"""消息格式化工具模块。

统一编解码错误消息的措辞，保证异常、日志和结果中的描述一致。
"""

from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def short_read(section: str, expected: int, actual: int) -> str:
        """读取字节不足"""
        return f"读取{section}失败: 期望 {expected} 字节，实际 {actual} 字节"

    @staticmethod
    def short_write(section: str, expected: int, actual: int) -> str:
        """写入字节不足"""
        return f"写入{section}失败: 期望 {expected} 字节，实际 {actual} 字节"

    @staticmethod
    def image_too_large(width: int, height: int, limit: int) -> str:
        """图像尺寸超出格式上限"""
        return f"图像尺寸过大: {width} x {height}，上限 {limit}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"
