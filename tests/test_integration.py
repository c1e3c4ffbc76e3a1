"""集成测试。

测试 Pillow 插件、文件转换器和 MCP 服务器。
"""

import io
import logging
from pathlib import Path

import pytest
from PIL import Image

from py_blub_codec import (
    BlubConverter,
    FormatError,
    ImageConfig,
    ImageOptions,
    StreamError,
    ValidationError,
    decode,
    get_version,
)
from py_blub_codec.plugin import BlubImageFile, _accept
from tests.conftest import pixels_of


class TestPillowPlugin:
    """Pillow 插件测试"""

    def test_format_registered(self):
        """导入包即注册格式"""
        assert Image.registered_extensions()[".blub"] == "BLUB"
        assert Image.MIME["BLUB"] == "image/x-blub"
        assert _accept(b"BLUB\x00\x00")
        assert not _accept(b"\x89PNG")

    def test_save_and_open(self, gradient_image):
        """通过 Pillow 保存与打开"""
        buffer = io.BytesIO()
        gradient_image.save(buffer, format="BLUB", hue_shift=90, compress_alpha_mask=False)

        buffer.seek(0)
        with Image.open(buffer) as img:
            assert isinstance(img, BlubImageFile)
            assert img.format == "BLUB"
            assert img.mode == "RGBA"
            assert img.size == gradient_image.size
            assert img.info["hue_shift"] == 90
            assert not img.blub_config.options.compress_alpha_mask
            img.load()
            opened = pixels_of(img)

        buffer.seek(0)
        assert opened == pixels_of(decode(buffer))

    def test_save_by_extension(self, temp_dir: Path, opaque_image):
        """按扩展名选择格式"""
        path = temp_dir / "image.blub"
        opaque_image.save(path, options=ImageOptions(uniform_hue=True))

        with Image.open(path) as img:
            assert img.format == "BLUB"
            assert img.info["uniform_hue"]
            assert set(pixels_of(img)) == {(255, 255, 255, 255)}

    def test_invalid_save_option(self, gradient_image):
        """保存参数无效"""
        with pytest.raises(ValidationError):
            gradient_image.save(io.BytesIO(), format="BLUB", hue_shift=300)

    def test_ignores_unrelated_save_params(self, gradient_image):
        """忽略 ImageOptions 之外的保存参数"""
        buffer = io.BytesIO()
        gradient_image.save(buffer, format="BLUB", optimize=True)

        assert buffer.getvalue()[:4] == b"BLUB"


class TestBlubConverter:
    """文件转换器测试"""

    def test_to_blub(self, sample_png: Path):
        """普通图像 → BLUB"""
        converter = BlubConverter()

        result = converter.to_blub(sample_png, hue_shift=135)

        assert result.success
        assert result.is_successful()
        assert result.output_path == sample_png.with_suffix(".blub")
        assert result.output_path.exists()
        assert result.format_used == "BLUB"
        assert result.dimensions == (23, 17)
        assert result.alpha_length > 0
        assert result.output_size > 0
        assert "BLUB" in result.get_summary()

    def test_round_trip_files(self, sample_png: Path, temp_dir: Path):
        """BLUB → PNG"""
        converter = BlubConverter()
        blub_path = temp_dir / "nested" / "out.blub"
        restored_path = temp_dir / "restored.png"

        converter.to_blub(sample_png, blub_path, ImageOptions(exclude_masked_pixels=True))
        result = converter.from_blub(blub_path, restored_path)

        assert result.success
        assert result.format_used == "PNG"
        with Image.open(restored_path) as restored, blub_path.open("rb") as fp:
            assert pixels_of(restored) == pixels_of(decode(fp))

    def test_export_without_transparency(self, sample_png: Path):
        """JPEG 导出前去掉 alpha"""
        converter = BlubConverter()
        blub_path = converter.to_blub(sample_png).output_path

        result = converter.from_blub(blub_path, format="jpeg")

        assert result.success
        assert result.output_path.suffix == ".jpg"
        with Image.open(result.output_path) as img:
            assert img.mode == "RGB"

    def test_default_output_format(self, sample_png: Path):
        converter = BlubConverter(default_output_format="webp")
        blub_path = converter.to_blub(sample_png).output_path

        result = converter.from_blub(blub_path)

        assert converter.default_output_format == "WEBP"
        assert result.output_path.suffix == ".webp"

    def test_unsupported_output_format(self):
        with pytest.raises(ValidationError):
            BlubConverter(default_output_format="NOPE")

    def test_missing_input(self, temp_dir: Path):
        """输入不存在时返回失败结果"""
        converter = BlubConverter()

        result = converter.to_blub(temp_dir / "missing.png")

        assert not result.success
        assert result.error
        assert result.input_size == 0
        assert result.get_summary().startswith("失败")

    def test_missing_input_logged_as_warning(self, temp_dir: Path, caplog):
        """输入不存在按警告记录，不经过编解码错误转换"""
        with caplog.at_level(logging.WARNING):
            result = BlubConverter().from_blub(temp_dir / "missing.blub")

        assert "文件不存在" in result.error
        assert {record.levelname for record in caplog.records} == {"WARNING"}

    def test_invalid_options(self, sample_png: Path):
        """选项无效时返回失败结果"""
        result = BlubConverter().to_blub(sample_png, hue_shift=999)

        assert not result.success
        assert "选项无效" in result.error
        assert not sample_png.with_suffix(".blub").exists()

    def test_decode_non_blub(self, sample_png: Path):
        """解码非 BLUB 文件"""
        result = BlubConverter().from_blub(sample_png, sample_png.with_name("x.png"))

        assert not result.success
        assert "格式错误" in result.error

    def test_inspect(self, sample_png: Path):
        converter = BlubConverter()
        blub_path = converter.to_blub(sample_png, uniform_hue=True).output_path

        config = converter.inspect(blub_path)

        assert isinstance(config, ImageConfig)
        assert config.options.uniform_hue
        assert config.pixel_length == 0

    def test_inspect_errors(self, sample_png: Path, temp_dir: Path):
        """文件头无效或文件不存在"""
        converter = BlubConverter()

        with pytest.raises(FormatError):
            converter.inspect(sample_png)
        with pytest.raises(StreamError):
            converter.inspect(temp_dir / "missing.blub")


class TestMCPServer:
    """MCP服务器测试"""

    def test_mcp_server_imports(self):
        """测试MCP服务器导入"""
        from py_blub_codec.mcp_server import mcp

        assert mcp is not None

    def test_mcp_tools(self):
        """测试MCP工具"""
        from py_blub_codec.mcp_server import decode_blub, encode_blub, get_blub_info

        assert encode_blub.name == "encode_blub"
        assert decode_blub.name == "decode_blub"
        assert get_blub_info.name == "get_blub_info"

    def test_encode_and_inspect_tools(self, sample_png: Path):
        """编码后读取文件头"""
        from py_blub_codec.mcp_server import encode_blub, get_blub_info

        response = encode_blub.fn(str(sample_png), hue_shift=64)
        info = get_blub_info.fn(response["output_path"])

        assert response["success"]
        assert info["success"]
        assert (info["width"], info["height"]) == (23, 17)
        assert info["options"]["hue_shift"] == 64
        assert info["hue_degrees"] == 90.0

    def test_tool_errors(self, sample_png: Path, temp_dir: Path):
        """工具错误响应"""
        from py_blub_codec.mcp_server import decode_blub, get_blub_info

        missing = decode_blub.fn(str(temp_dir / "missing.blub"))
        not_blub = get_blub_info.fn(str(sample_png))

        assert missing["error_type"] == "file"
        assert not_blub["success"] is False
        assert not_blub["error_type"] == "FormatError"
        assert not_blub["details"] == {"section": "文件头"}


def test_version():
    assert get_version() == "0.1.0"
