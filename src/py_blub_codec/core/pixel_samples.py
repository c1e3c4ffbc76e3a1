"""像素亮度编解码模块。

像素区段只保存满足包含规则的亮度字节：
    not uniform_hue and (not exclude_masked_pixels or 像素不透明)
遍历顺序与 alpha 遮罩一致。
"""

import numpy as np

from ..exceptions import FormatError
from ..models.constants import FULL_LUMA
from ..models.image_options import ImageOptions


def inclusion_mask(mask: np.ndarray, options: ImageOptions) -> np.ndarray:
    """每个像素是否在像素区段中占一个字节"""
    mask = np.asarray(mask, dtype=bool)
    if options.uniform_hue:
        return np.zeros(mask.shape, dtype=bool)
    if not options.exclude_masked_pixels:
        return np.ones(mask.shape, dtype=bool)
    return mask.copy()


def encode_samples(luma: np.ndarray, mask: np.ndarray, options: ImageOptions) -> bytes:
    """按包含规则挑选亮度字节"""
    included = inclusion_mask(mask, options)
    return np.asarray(luma, dtype=np.uint8)[included].tobytes()


def decode_samples(data: bytes, mask: np.ndarray, options: ImageOptions) -> np.ndarray:
    """按遍历顺序消费亮度字节，未保存亮度的像素取满亮度 255

    Raises:
        FormatError: 像素区段字节少于需要的数量
    """
    included = inclusion_mask(mask, options)
    needed = int(np.count_nonzero(included))
    if len(data) < needed:
        raise FormatError(
            f"像素区段字节不足: 需要 {needed} 字节，实际 {len(data)} 字节", "像素数据"
        )

    luma = np.full(included.shape, FULL_LUMA, dtype=np.uint8)
    if needed:
        luma[included] = np.frombuffer(data, dtype=np.uint8, count=needed)
    return luma
