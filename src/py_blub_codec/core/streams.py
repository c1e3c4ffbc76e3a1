"""压缩字节流模块。

在调用方提供的字节流之上叠加 zlib 压缩/解压，
两者都是上下文管理器，任何退出路径都会关闭；写入器只在正常退出时刷新尾部字节。
解压输出按区段剩余长度限制，不会超出文件头声明的长度。
"""

import zlib
from typing import Any, BinaryIO

from ..exceptions import StreamError
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


def write_exact(stream: BinaryIO, data: bytes, section: str) -> None:
    """写入全部字节，写入不足即失败"""
    try:
        written = stream.write(data)
    except OSError as e:
        raise StreamError(
            MessageFormatter.operation_failed(f"写入{section}", "stream", e), section
        ) from e

    # 部分流（例如某些包装器）不返回写入数量
    if written is not None and written != len(data):
        raise StreamError.short_write(section, len(data), written)


class DeflateWriter:
    """zlib 压缩写入器"""

    def __init__(self, stream: BinaryIO, level: int = 6):
        self._stream = stream
        self._compressor = zlib.compressobj(level)
        self.closed = False

    def write(self, data: bytes, section: str) -> None:
        """压缩并写入一个区段"""
        chunk = self._compressor.compress(data)
        if chunk:
            write_exact(self._stream, chunk, section)

    def close(self) -> None:
        """刷新压缩器尾部字节"""
        if self.closed:
            return
        self.closed = True
        write_exact(self._stream, self._compressor.flush(), "压缩流尾部")

    def __enter__(self) -> "DeflateWriter":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        del exc_val, exc_tb
        if exc_type is None:
            self.close()
        else:
            # 异常退出时不写入尾部字节，保留原始错误
            self.closed = True


class DeflateReader:
    """zlib 解压读取器，提供按区段读取恰好 N 字节的接口"""

    def __init__(self, stream: BinaryIO, chunk_size: int = 64 * 1024):
        self._stream = stream
        self._chunk_size = chunk_size
        self._decompressor = zlib.decompressobj()
        self._buffer = bytearray()
        self.closed = False

    def read_exact(self, size: int, section: str) -> bytes:
        """读取恰好 size 字节解压数据

        Raises:
            StreamError: 数据不足、底层流失败或压缩数据损坏
        """
        while len(self._buffer) < size and not self._decompressor.eof:
            # 先消费上次因长度限制未解压的输入
            raw = self._decompressor.unconsumed_tail or self._read_chunk(section)
            if not raw:
                break

            try:
                self._buffer += self._decompressor.decompress(
                    raw, size - len(self._buffer)
                )
            except zlib.error as e:
                raise StreamError(f"解压{section}失败: {e}", section) from e

        if len(self._buffer) < size:
            raise StreamError.short_read(section, size, len(self._buffer))

        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _read_chunk(self, section: str) -> bytes:
        try:
            return self._stream.read(self._chunk_size)
        except OSError as e:
            raise StreamError(
                MessageFormatter.operation_failed(f"读取{section}", "stream", e),
                section,
            ) from e

    def close(self) -> None:
        self.closed = True
        self._buffer.clear()

    def __enter__(self) -> "DeflateReader":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        del exc_type, exc_val, exc_tb
        self.close()
