"""工具模块包。

提供纯工具函数，不包含编解码逻辑。
"""

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


__all__ = [
    "MessageFormatter",
    "get_logger",
]
