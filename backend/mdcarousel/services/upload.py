"""
上传存储 - 校验并保存图片

规则：
- 仅接受 image/* 类型
- 大小上限由 upload_limits.max_size_mb 配置（默认 5MB）
- 文件以 uuid 重命名保存到 public/uploads/，返回 data: 地址与存储路径
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from ..interfaces import UploadError
from ..render.asset_resolver import CONTENT_TYPES
from ..render.placeholders import to_data_uri

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
}


class SupportsRead(Protocol):
    """上传文件对象（FastAPI UploadFile 满足该协议）"""
    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


class UploadResult(BaseModel):
    """上传结果"""
    url: str
    path: str
    content_type: str
    size: int


class UploadStore:
    """上传存储实现"""

    def __init__(
        self,
        uploads_dir: Path,
        uploads_prefix: str = "/uploads/",
        max_size_mb: float = 5,
        allowed_mime_prefix: str = "image/",
    ):
        self.uploads_dir = Path(uploads_dir)
        self.uploads_prefix = uploads_prefix
        self.max_bytes = int(max_size_mb * 1024 * 1024)
        self.allowed_mime_prefix = allowed_mime_prefix

    @classmethod
    def from_config(cls, config) -> UploadStore:
        return cls(
            uploads_dir=config.storage.uploads_dir,
            uploads_prefix=config.storage.uploads_prefix,
            max_size_mb=config.upload_limits.max_size_mb,
            allowed_mime_prefix=config.upload_limits.allowed_mime_prefix,
        )

    def validate(self, content_type: str | None, size: int) -> None:
        """校验类型与大小"""
        if size == 0:
            raise UploadError("未上传文件")
        if not content_type or not content_type.startswith(self.allowed_mime_prefix):
            raise UploadError("文件必须是图片")
        if size > self.max_bytes:
            raise UploadError(f"文件大小不能超过 {self.max_bytes // (1024 * 1024)}MB")

    def _extension(self, filename: str | None, content_type: str) -> str:
        """扩展名以已校验的 MIME 类型为准，文件名后缀仅在类型一致时沿用"""
        suffix = Path(filename or "").suffix.lower()
        if CONTENT_TYPES.get(suffix) == content_type:
            return suffix
        return _EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type) or ".img"

    async def receive(self, upload: SupportsRead) -> UploadResult:
        """读取上传流（最多读到上限+1字节即停止）并保存"""
        data = await upload.read(self.max_bytes + 1)
        return await self.save(upload.filename, upload.content_type, data)

    async def save(self, filename: str | None, content_type: str | None, data: bytes) -> UploadResult:
        """校验并保存上传文件"""
        self.validate(content_type, len(data))

        name = f"{uuid.uuid4()}{self._extension(filename, content_type)}"
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread((self.uploads_dir / name).write_bytes, data)
        logger.info(f"图片已上传: {name} ({len(data)} bytes)")

        return UploadResult(
            url=to_data_uri(data, content_type),
            path=f"{self.uploads_prefix}{name}",
            content_type=content_type,
            size=len(data),
        )
