"""Alpha 遮罩编解码模块。

把逐像素的不透明序列（行优先，y 外层 x 内层）编码为字节：
- 逐位遮罩：每像素 1 位，高位在前，末字节低位补零
- 游程编码：每条记录 1 字节，bit 7 为取值，bit 0-6 为长度 1-127
"""

from collections.abc import Iterable
from enum import Enum

import numpy as np

from ..exceptions import FormatError
from ..models.constants import RunLength
from ..utils.logging_helpers import get_logger


logger = get_logger()


class RunState(str, Enum):
    """游程累加器状态"""

    IDLE = "idle"  # 没有进行中的游程
    ACCUMULATING = "accumulating"  # 正在累加
    FLUSH_PENDING = "flush_pending"  # 已达到 127，等待输出


class RunLengthEncoder:
    """遮罩游程编码器

    取值变化时立即输出当前游程；长度达到 127 时进入 FLUSH_PENDING，
    在下一个像素到来前或 finish() 时输出。
    """

    def __init__(self) -> None:
        self.state = RunState.IDLE
        self.value = False
        self.length = 0
        self._records = bytearray()

    @property
    def records(self) -> bytes:
        """已输出的记录"""
        return bytes(self._records)

    def push(self, value: bool) -> None:
        """追加一个像素的不透明标志"""
        match self.state:
            case RunState.FLUSH_PENDING:
                self._flush()
            case RunState.ACCUMULATING if value != self.value:
                self._flush()

        if self.state is RunState.IDLE:
            self.value = bool(value)
            self.length = 0
            self.state = RunState.ACCUMULATING

        self.length += 1
        if self.length == RunLength.MAX_RUN:
            self.state = RunState.FLUSH_PENDING

    def extend(self, values: Iterable[bool]) -> None:
        for value in values:
            self.push(value)

    def finish(self) -> bytes:
        """输出剩余游程并返回全部记录"""
        if self.state is not RunState.IDLE:
            self._flush()
        return self.records

    def _flush(self) -> None:
        record = self.length
        if self.value:
            record |= RunLength.VALUE_BIT
        self._records.append(record)

        self.length = 0
        self.state = RunState.IDLE


def encode_rle(mask: Iterable[bool]) -> bytes:
    """游程编码遮罩"""
    encoder = RunLengthEncoder()
    encoder.extend(mask.tolist() if isinstance(mask, np.ndarray) else mask)
    return encoder.finish()


def decode_rle(data: bytes, count: int) -> np.ndarray:
    """展开游程记录，直到得到 count 个取值

    Raises:
        FormatError: 出现长度为 0 的记录或记录不足
    """
    mask = np.zeros(count, dtype=bool)
    filled = 0

    for index, record in enumerate(data):
        if filled >= count:
            break

        length = record & RunLength.LENGTH_MASK
        if length == 0:
            raise FormatError(f"alpha 遮罩第 {index} 条游程长度为 0", "alpha 遮罩")

        end = min(filled + length, count)
        mask[filled:end] = bool(record & RunLength.VALUE_BIT)
        filled = end

    if filled < count:
        raise FormatError(
            f"alpha 遮罩游程不足: 需要 {count} 个像素，仅得到 {filled} 个", "alpha 遮罩"
        )

    return mask


def encode_bitmask(mask: np.ndarray) -> bytes:
    """逐位编码遮罩，高位在前"""
    return np.packbits(np.asarray(mask, dtype=bool)).tobytes()


def decode_bitmask(data: bytes, count: int) -> np.ndarray:
    """读取 ceil(count/8) 字节，第 i 个像素取第 i/8 字节的第 7 - i%8 位"""
    needed = (count + 7) // 8
    if len(data) < needed:
        raise FormatError(
            f"alpha 遮罩字节不足: 需要 {needed} 字节，实际 {len(data)} 字节", "alpha 遮罩"
        )
    if count == 0:
        return np.zeros(0, dtype=bool)

    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8, count=needed), count=count)
    return bits.astype(bool)


def encode_alpha_mask(mask: np.ndarray, compress: bool) -> bytes:
    """按选项选择遮罩编码方式"""
    data = encode_rle(mask) if compress else encode_bitmask(mask)
    logger.debug(f"alpha 遮罩编码完成: {len(mask)} 像素 → {len(data)} 字节")
    return data


def decode_alpha_mask(data: bytes, count: int, compress: bool) -> np.ndarray:
    """按选项选择遮罩解码方式"""
    return decode_rle(data, count) if compress else decode_bitmask(data, count)
