"""
打包器 - 按页序打包图片为 zip

职责：
1. 图片按 page-<页码>.png 命名（页码从1起）
2. 写入 manifest.json（页数/画布尺寸/生成时间）
3. 支持返回字节（接口下载）或写入磁盘（命令行）

测试要点：
- test_export_names: 文件命名与顺序
- test_manifest_structure: manifest结构
"""

from __future__ import annotations

import io
import json
import zipfile
from datetime import datetime
from pathlib import Path

from ..interfaces import IArchiveExporter, ValidationError

ARCHIVE_NAME = "xhs-pages.zip"


def page_filename(index: int) -> str:
    """页序(0起) → 包内文件名"""
    return f"page-{index + 1}.png"


class ArchiveExporter(IArchiveExporter):
    """打包器实现"""

    def __init__(self, canvas_width: int = 1080, canvas_height: int = 1440):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

    def export(self, images: list[bytes]) -> bytes:
        """打包为 zip 字节"""
        if not images:
            raise ValidationError("没有可打包的图片")

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for i, image in enumerate(images):
                zf.writestr(page_filename(i), image)
            zf.writestr(
                "manifest.json",
                json.dumps(self.generate_manifest(images), ensure_ascii=False, indent=2),
            )
        return buffer.getvalue()

    def write(self, images: list[bytes], output_path: Path) -> Path:
        """打包并写入磁盘"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.export(images))
        return output_path

    def generate_manifest(self, images: list[bytes]) -> dict:
        """生成manifest内容"""
        return {
            "schema_version": "1.0",
            "page_total": len(images),
            "canvas": {"width": self.canvas_width, "height": self.canvas_height},
            "files": [
                {"name": page_filename(i), "bytes": len(image)}
                for i, image in enumerate(images)
            ],
            "created_at": datetime.now().isoformat(),
        }
