"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Page: 单页源文本/中间产物/状态
- RenderJob: 单页渲染输入（画布+样式参数）
- GenerationBatch: 单次文档提交的有序结果与进度
- ImagePlaceholder / ResolvedAsset: 图片占位符与解析结果
"""

from .asset import ImagePlaceholder, ResolvedAsset
from .batch import BatchProgress, BatchStatus, GenerationBatch
from .page import Page, PageStatus
from .render_job import RenderJob, StyleParams

__all__ = [
    "Page",
    "PageStatus",
    "RenderJob",
    "StyleParams",
    "GenerationBatch",
    "BatchStatus",
    "BatchProgress",
    "ImagePlaceholder",
    "ResolvedAsset",
]
