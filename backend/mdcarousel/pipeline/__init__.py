"""
流水线模块 - 批量渲染编排与打包

子模块：
- orchestrator: 页面编排（拆分/并发渲染/进度/失败策略）
- packager: 按页序打包 zip
"""

from .orchestrator import PageOrchestrator
from .packager import ARCHIVE_NAME, ArchiveExporter, page_filename

__all__ = [
    "PageOrchestrator",
    "ArchiveExporter",
    "ARCHIVE_NAME",
    "page_filename",
]
