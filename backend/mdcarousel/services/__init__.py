"""
外部协作服务 - 图片上传与内容生成
"""

from .generator import ContentGenerator
from .upload import UploadResult, UploadStore

__all__ = [
    "ContentGenerator",
    "UploadStore",
    "UploadResult",
]
