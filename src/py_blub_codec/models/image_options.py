"""编码选项与解码配置模型。

ImageOptions 描述图像如何被编码，ImageConfig 是从文件头解析出的只读摘要。
"""

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .constants import HUE_STEPS, BlubFormat, HeaderFlag


class ImageOptions(BaseModel):
    """编码选项

    六个字段完整决定了载荷的解释方式。
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hue_shift: int = Field(
        0, ge=0, le=255, description="全局色相偏移，0-255 映射到 0-360°"
    )
    alpha_threshold: int = Field(
        0, ge=0, le=255, description="不透明判定阈值（仅编码使用，alpha 必须严格大于它）"
    )
    use_alpha_mask: bool = Field(True, description="是否写入 alpha 遮罩")
    compress_alpha_mask: bool = Field(True, description="遮罩使用游程编码而非逐位编码")
    uniform_hue: bool = Field(
        False, description="不保存像素亮度，所有不透明像素以满亮度渲染"
    )
    exclude_masked_pixels: bool = Field(False, description="透明像素不写入亮度字节")

    @staticmethod
    def degrees_for(hue_shift: int) -> float:
        """色相偏移 0-255 对应的角度"""
        return (hue_shift / HUE_STEPS) * 360

    @property
    def hue_degrees(self) -> float:
        return self.degrees_for(self.hue_shift)

    @property
    def flags(self) -> HeaderFlag:
        """文件头标志字节"""
        flags = HeaderFlag.NONE
        if self.compress_alpha_mask:
            flags |= HeaderFlag.COMPRESS_ALPHA
        if self.exclude_masked_pixels:
            flags |= HeaderFlag.EXCLUDE_MASKED_PIXELS
        return flags

    @classmethod
    def from_header(
        cls, hue_shift: int, flags: int, alpha_length: int, pixel_length: int
    ) -> "ImageOptions":
        """从文件头字段还原选项，alpha_threshold 不持久化，固定为 0"""
        # 未定义的标志位忽略
        known = HeaderFlag.COMPRESS_ALPHA | HeaderFlag.EXCLUDE_MASKED_PIXELS
        header_flags = HeaderFlag(flags & known)
        return cls(
            hue_shift=hue_shift,
            alpha_threshold=0,
            use_alpha_mask=alpha_length > 0,
            compress_alpha_mask=HeaderFlag.COMPRESS_ALPHA in header_flags,
            uniform_hue=pixel_length == 0,
            exclude_masked_pixels=HeaderFlag.EXCLUDE_MASKED_PIXELS in header_flags,
        )


class ImageConfig(BaseModel):
    """解码时的文件头摘要，每次解码创建一次，之后不可变"""

    model_config = ConfigDict(frozen=True)

    options: ImageOptions
    width: int = Field(ge=0, le=BlubFormat.MAX_DIMENSION, description="图像宽度")
    height: int = Field(ge=0, le=BlubFormat.MAX_DIMENSION, description="图像高度")
    alpha_length: int = Field(
        ge=0, le=BlubFormat.MAX_SECTION_LENGTH, description="alpha 区段字节数"
    )
    pixel_length: int = Field(
        ge=0, le=BlubFormat.MAX_SECTION_LENGTH, description="像素区段字节数"
    )

    @model_validator(mode="after")
    def validate_section_lengths(self) -> "ImageConfig":
        if self.options.use_alpha_mask != (self.alpha_length > 0):
            raise ValueError("use_alpha_mask 与 alpha_length 不一致")
        if self.options.uniform_hue != (self.pixel_length == 0):
            raise ValueError("uniform_hue 与 pixel_length 不一致")
        return self

    @computed_field
    def pixel_count(self) -> int:
        """像素总数"""
        return self.width * self.height

    @computed_field
    def payload_length(self) -> int:
        """解压后载荷总字节数"""
        return self.alpha_length + self.pixel_length

    def get_payload_size_human(self) -> str:
        """人性化显示载荷大小"""
        return naturalsize(self.payload_length, binary=True)
