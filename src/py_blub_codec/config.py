"""统一配置管理模块。

提供编解码器的默认参数，支持环境变量覆盖。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class CodecDefaults:
    """编解码相关的默认配置"""

    # zlib 压缩级别 0-9
    COMPRESS_LEVEL: int = 6

    # 解压时每次从底层流读取的字节数
    READ_CHUNK_SIZE: int = 64 * 1024

    # BLUB 解码后默认导出的格式
    DEFAULT_OUTPUT_FORMAT: str = "PNG"


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.codec = CodecDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if level := os.getenv("BLUB_COMPRESS_LEVEL"):
            value = min(max(int(level), 0), 9)
            object.__setattr__(self.codec, "COMPRESS_LEVEL", value)

        if chunk_size := os.getenv("BLUB_READ_CHUNK_SIZE"):
            object.__setattr__(self.codec, "READ_CHUNK_SIZE", max(int(chunk_size), 1))

        if output_format := os.getenv("BLUB_OUTPUT_FORMAT"):
            object.__setattr__(
                self.codec, "DEFAULT_OUTPUT_FORMAT", output_format.upper()
            )

        if log_level := os.getenv("BLUB_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
