"""转换结果模型。

定义文件级 BLUB 转换操作的结果数据结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, Field


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    def is_successful(self) -> bool:
        """检查是否成功"""
        return self.success and self.error is None

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class ConversionResult(BaseResult):
    """单个文件转换结果"""

    input_path: Path = Field(description="输入文件路径")
    output_path: Path | None = Field(None, description="输出文件路径")
    input_size: int = Field(0, ge=0, description="输入文件大小（字节）")
    output_size: int = Field(0, ge=0, description="输出文件大小（字节）")
    format_used: str = Field("UNKNOWN", description="输出格式")

    dimensions: tuple[int, int] | None = Field(None, description="图像尺寸")
    alpha_length: int | None = Field(None, description="alpha 区段字节数")
    pixel_length: int | None = Field(None, description="像素区段字节数")

    def get_size_ratio(self) -> float:
        """输出相对输入的大小比例（百分比）"""
        if self.input_size == 0:
            return 0.0
        return (self.output_size / self.input_size) * 100

    def get_input_size_human(self) -> str:
        return self.format_size(self.input_size)

    def get_output_size_human(self) -> str:
        return self.format_size(self.output_size)

    def get_summary(self) -> str:
        """转换结果摘要"""
        if not self.success:
            return f"失败: {self.error}"

        return (
            f"{self.get_input_size_human()} → {self.get_output_size_human()} "
            f"({self.format_used}, {self.get_size_ratio():.1f}%)"
        )
