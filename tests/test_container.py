"""容器编解码测试。

测试完整的编码 → 解码流程、区段省略规则和错误路径。
"""

import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from py_blub_codec import (
    FormatError,
    ImageOptions,
    SizeError,
    StreamError,
    decode,
    decode_config,
    encode,
)
from py_blub_codec.core.color import color_to_gray, gray_to_color
from py_blub_codec.core.container import ALPHA_SECTION, PIXEL_SECTION, format_image
from py_blub_codec.core.streams import DeflateReader, DeflateWriter
from tests.conftest import decode_bytes, encode_to_bytes, make_gradient, pixels_of


def expected_pixels(image: Image.Image, options: ImageOptions) -> list[tuple]:
    """逐像素计算预期的解码结果"""
    expected = []
    for color in pixels_of(image):
        luma, opaque = color_to_gray(color, options.alpha_threshold)
        if not options.use_alpha_mask:
            opaque = True
        included = not options.uniform_hue and (
            not options.exclude_masked_pixels or opaque
        )
        expected.append(gray_to_color(luma if included else 255, opaque, options.hue_shift))
    return expected


class ShortWriter(io.BytesIO):
    """每次少写一个字节"""

    def write(self, data) -> int:
        return super().write(bytes(data)[:-1])


class FailingWriter(io.BytesIO):
    def write(self, data) -> int:
        raise OSError("disk full")


class PayloadFailingWriter(io.BytesIO):
    """文件头写入成功，之后的写入失败"""

    def write(self, data) -> int:
        if self.tell() >= 32:
            raise OSError("disk full")
        return super().write(data)


class TestRoundTrip:
    """编码后解码测试"""

    @pytest.mark.parametrize(
        "option_fields",
        [
            {},
            {"compress_alpha_mask": False},
            {"exclude_masked_pixels": True},
            {"uniform_hue": True, "hue_shift": 200},
            {"hue_shift": 135, "alpha_threshold": 100},
            {"use_alpha_mask": False, "hue_shift": 40},
        ],
    )
    def test_round_trip(self, gradient_image, option_fields):
        """解码结果与逐像素变换一致"""
        options = ImageOptions(**option_fields)

        decoded = decode_bytes(encode_to_bytes(gradient_image, **option_fields))

        assert decoded.mode == "RGBA"
        assert decoded.size == gradient_image.size
        assert pixels_of(decoded) == expected_pixels(gradient_image, options)

    def test_options_recovered_from_header(self, gradient_image):
        """文件头还原除阈值外的所有选项"""
        options = ImageOptions(
            hue_shift=77,
            alpha_threshold=50,
            compress_alpha_mask=False,
            exclude_masked_pixels=True,
        )
        buffer = io.BytesIO()
        encode(buffer, gradient_image, options)
        buffer.seek(0)

        config = decode_config(buffer)

        assert config.options == options.model_copy(update={"alpha_threshold": 0})
        assert config.width == 23
        assert config.height == 17

    def test_default_options(self, gradient_image):
        """未提供选项时使用默认值"""
        buffer = io.BytesIO()
        encode(buffer, gradient_image)

        assert buffer.getvalue() == encode_to_bytes(gradient_image)

    def test_known_payload(self):
        """解码手工构造的文件"""
        header = b"BLUB" + struct.pack("<HHIIBB14x", 3, 1, 2, 2, 0, 0xC0)
        payload = zlib.compress(b"\x82\x01" + bytes([10, 20]))

        decoded = decode(io.BytesIO(header + payload))

        assert pixels_of(decoded) == [
            (10, 10, 10, 255),
            (20, 20, 20, 255),
            (255, 255, 255, 0),
        ]

    def test_grayscale_input(self):
        """L 模式图像经 RGBA 转换后编码"""
        img = Image.new("L", (4, 4), color=90)

        decoded = decode_bytes(encode_to_bytes(img))

        assert set(pixels_of(decoded)) == {(90, 90, 90, 255)}

    def test_empty_image(self):
        """0x0 图像"""
        img = Image.new("RGBA", (0, 0))

        data = encode_to_bytes(img)
        config = decode_config(io.BytesIO(data))

        assert config.pixel_count == 0
        assert config.alpha_length == 0
        assert decode_bytes(data).size == (0, 0)


class TestSectionRules:
    """区段省略规则测试"""

    @pytest.mark.parametrize("compress", [True, False])
    def test_opaque_image_omits_alpha(self, opaque_image, compress):
        """全不透明时不写 alpha 区段"""
        data = encode_to_bytes(opaque_image, compress_alpha_mask=compress)

        config = decode_config(io.BytesIO(data))

        assert config.alpha_length == 0
        assert not config.options.use_alpha_mask
        assert all(px[3] == 255 for px in pixels_of(decode_bytes(data)))

    def test_threshold_makes_image_opaque(self):
        """所有 alpha 都大于阈值时同样省略遮罩"""
        img = Image.new("RGBA", (5, 5), color=(10, 20, 30, 60))

        opaque = decode_config(io.BytesIO(encode_to_bytes(img, alpha_threshold=59)))
        masked = decode_config(io.BytesIO(encode_to_bytes(img, alpha_threshold=60)))

        assert opaque.alpha_length == 0
        assert masked.alpha_length > 0

    def test_uniform_hue_omits_pixels(self, gradient_image):
        """统一色相不写像素区段"""
        data = encode_to_bytes(gradient_image, uniform_hue=True)

        config = decode_config(io.BytesIO(data))

        assert config.pixel_length == 0
        assert config.options.uniform_hue
        assert {px[:3] for px in pixels_of(decode_bytes(data)) if px[3]} == {
            (255, 255, 255)
        }

    def test_exclude_masked_shrinks_pixels(self, gradient_image):
        """排除透明像素后像素区段只包含不透明像素"""
        opaque_count = sum(
            1 for px in pixels_of(gradient_image) if color_to_gray(px, 0)[1]
        )

        config = decode_config(
            io.BytesIO(encode_to_bytes(gradient_image, exclude_masked_pixels=True))
        )

        assert config.pixel_length == opaque_count

    def test_header_only_file(self, opaque_image):
        """无需任何区段时不读取压缩流"""
        data = encode_to_bytes(opaque_image, uniform_hue=True)

        decoded = decode(io.BytesIO(data[:32]))

        assert set(pixels_of(decoded)) == {(255, 255, 255, 255)}

    def test_unconvertible_image(self, monkeypatch):
        """无法转换为 RGBA 的图像按全透明处理"""
        img = Image.new("RGB", (3, 2))

        def fail(*args, **kwargs):
            raise ValueError("conversion not supported")

        monkeypatch.setattr(img, "convert", fail)

        frame = format_image(img, ImageOptions())
        decoded = decode_bytes(encode_to_bytes(img))

        assert not frame.mask.any()
        assert set(pixels_of(decoded)) == {(0, 0, 0, 0)}


class TestErrors:
    """错误路径测试"""

    def test_oversized_image(self):
        """超出尺寸上限时不写入任何字节"""
        img = Image.new("L", (65536, 1))
        buffer = io.BytesIO()

        with pytest.raises(SizeError):
            encode(buffer, img)

        assert buffer.getvalue() == b""

    def test_empty_stream(self):
        with pytest.raises(FormatError):
            decode(io.BytesIO(b""))

    def test_not_blub(self, gradient_image):
        """其他格式的文件"""
        buffer = io.BytesIO()
        gradient_image.save(buffer, "PNG")

        with pytest.raises(FormatError):
            decode(io.BytesIO(buffer.getvalue()))

    def test_truncated_payload(self, gradient_image):
        """载荷被截断"""
        data = encode_to_bytes(gradient_image)

        with pytest.raises(StreamError) as exc_info:
            decode_bytes(data[:36])

        assert exc_info.value.actual < exc_info.value.expected

    def test_corrupt_payload(self, gradient_image):
        """载荷不是 zlib 数据"""
        data = encode_to_bytes(gradient_image)

        with pytest.raises(StreamError):
            decode_bytes(data[:32] + b"not zlib data at all")

    def test_invalid_run_record(self):
        """alpha 遮罩含长度为 0 的游程"""
        header = b"BLUB" + struct.pack("<HHIIBB14x", 1, 1, 1, 1, 0, 0x80)

        with pytest.raises(FormatError):
            decode(io.BytesIO(header + zlib.compress(b"\x00\x10")))

    def test_short_write(self, gradient_image):
        with pytest.raises(StreamError):
            encode(ShortWriter(), gradient_image)

    def test_failing_stream(self, gradient_image):
        """底层流写入失败"""
        with pytest.raises(StreamError, match="disk full"):
            encode(FailingWriter(), gradient_image)

    def test_payload_write_failure_names_section(self):
        """压缩区段写入失败时报告该区段，而不是压缩流尾部"""
        rng = np.random.default_rng(7)
        img = Image.fromarray(rng.integers(0, 256, (600, 600, 4), dtype=np.uint8))

        with pytest.raises(StreamError, match="disk full") as exc_info:
            encode(PayloadFailingWriter(), img, ImageOptions(compress_alpha_mask=False))

        assert exc_info.value.section in (ALPHA_SECTION, PIXEL_SECTION)

    def test_writer_skips_trailer_after_error(self):
        """异常退出时不刷新尾部字节"""
        buffer = io.BytesIO()

        with pytest.raises(RuntimeError):
            with DeflateWriter(buffer) as writer:
                writer.write(b"abc", PIXEL_SECTION)
                raise RuntimeError("boom")

        decompressor = zlib.decompressobj()
        decompressor.decompress(buffer.getvalue())
        assert writer.closed
        assert not decompressor.eof

    def test_reader_output_bounded_by_section(self):
        """解压输出不超过请求的区段长度"""
        payload = zlib.compress(bytes(1_000_000))
        reader = DeflateReader(io.BytesIO(payload), chunk_size=len(payload))

        assert reader.read_exact(10, ALPHA_SECTION) == bytes(10)
        assert len(reader._buffer) == 0
        assert reader.read_exact(999_990, PIXEL_SECTION) == bytes(999_990)

    def test_large_image_round_trip(self):
        """多次读取底层流"""
        img = make_gradient(400, 300)

        decoded = decode_bytes(encode_to_bytes(img, compress_alpha_mask=False))

        assert pixels_of(decoded) == expected_pixels(img, ImageOptions())
