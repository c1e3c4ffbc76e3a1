#!/usr/bin/env python3
"""BLUB 编解码演示脚本。

展示 py_blub_codec 库的核心功能，包括：
- 内存中编码与解码
- 通过 Pillow 打开和保存 .blub 文件
- 文件转换器与文件头查看
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image

from py_blub_codec import BlubConverter, ImageOptions, decode, encode


def get_output_dir(subdir: str = "") -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    project_root = Path(__file__).parent.parent
    output_dir = project_root / "tmp" / "examples"
    if subdir:
        output_dir = output_dir / subdir
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def create_sprite(size: int = 128) -> Image.Image:
    """生成一个带透明背景的圆形渐变素材"""
    y, x = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2
    distance = np.hypot(x - center, y - center) / center

    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    pixels[..., 0] = (x * 255 // (size - 1)).astype(np.uint8)
    pixels[..., 1] = (y * 255 // (size - 1)).astype(np.uint8)
    pixels[..., 2] = 160
    pixels[..., 3] = np.where(distance <= 1.0, 255, 0).astype(np.uint8)
    return Image.fromarray(pixels)


def demo_in_memory():
    """内存中编码与解码"""
    print("=== 内存编解码演示 ===")

    sprite = create_sprite()
    variants = {
        "默认": ImageOptions(),
        "逐位遮罩": ImageOptions(compress_alpha_mask=False),
        "排除透明像素": ImageOptions(exclude_masked_pixels=True),
        "统一色相": ImageOptions(uniform_hue=True, hue_shift=160),
    }

    for name, options in variants.items():
        buffer = io.BytesIO()
        encode(buffer, sprite, options)
        size = buffer.tell()

        buffer.seek(0)
        decoded = decode(buffer)
        print(f"  {name}: {size} 字节, 解码为 {decoded.mode} {decoded.size}")


def demo_pillow_plugin():
    """通过 Pillow 保存和打开"""
    print("\n=== Pillow 插件演示 ===")

    output_dir = get_output_dir("plugin")
    path = output_dir / "sprite.blub"

    create_sprite().save(path, hue_shift=96, exclude_masked_pixels=True)
    print(f"📁 已保存: {path}")

    with Image.open(path) as img:
        print(f"  格式: {img.format}, 模式: {img.mode}, 尺寸: {img.size}")
        print(f"  色相偏移: {img.info['hue_shift']}")
        img.save(output_dir / "sprite_preview.png")


def demo_converter():
    """文件转换器"""
    print("\n=== 文件转换演示 ===")

    output_dir = get_output_dir("converter")
    source = output_dir / "source.png"
    create_sprite(256).save(source)

    converter = BlubConverter()

    encoded = converter.to_blub(source, hue_shift=32)
    print(f"PNG → BLUB: {encoded.get_summary()}")
    if not encoded.success:
        return

    config = converter.inspect(encoded.output_path)
    print(f"  文件头: {config.width}x{config.height}, 载荷 {config.get_payload_size_human()}")
    print(f"  选项: {config.options.model_dump()}")

    for fmt in ("PNG", "WEBP", "JPEG"):
        restored = converter.from_blub(encoded.output_path, format=fmt)
        print(f"BLUB → {fmt}: {restored.get_summary()}")


def main():
    """主函数"""
    print("🖼️  BLUB 编解码演示")
    print("=" * 50)

    try:
        demo_in_memory()
        demo_pillow_plugin()
        demo_converter()

        print("\n✅ 所有演示完成！")

    except Exception as e:
        print(f"\n❌ 演示过程中出现错误: {e}")
        raise


if __name__ == "__main__":
    main()
