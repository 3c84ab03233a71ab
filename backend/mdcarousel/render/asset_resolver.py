"""
图片资源解析器 - 渲染时直接提供图片字节，不走网络

支持两类地址：
1. data: 内联地址 → 直接解码（base64 或 URL 编码）
2. 本地上传路径（/uploads/x.png，或资源基址下的同名路径）→ 读取存储目录文件，
   按扩展名推断类型（png/jpg/jpeg/gif，默认 jpeg）

其他地址返回 None，由渲染引擎正常请求。
解析失败抛出 AssetResolutionError，调用方放弃该图片，页面照常渲染。

测试要点：
- test_resolve_data_uri: 内联地址解码
- test_resolve_upload_path: 本地文件读取
- test_missing_file_raises: 文件不存在
- test_path_traversal_rejected: 越界路径拒绝
- test_other_scheme_passthrough: 其他地址放行
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from urllib.parse import unquote, unquote_to_bytes, urlsplit

from ..interfaces import AssetResolutionError, IAssetResolver
from ..models import ResolvedAsset

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
}
DEFAULT_CONTENT_TYPE = "image/jpeg"


def guess_content_type(path: str) -> str:
    """按扩展名推断图片类型"""
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def decode_data_uri(url: str) -> ResolvedAsset:
    """解码 data: 地址"""
    try:
        header, payload = url[len("data:"):].split(",", 1)
    except ValueError as e:
        raise AssetResolutionError("data 地址缺少数据段") from e

    parts = header.split(";")
    content_type = parts[0] or "text/plain"
    try:
        if "base64" in parts[1:]:
            body = base64.b64decode(payload, validate=True)
        else:
            body = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise AssetResolutionError(f"data 地址解码失败: {e}") from e

    return ResolvedAsset(content_type=content_type, body=body)


class AssetResolver(IAssetResolver):
    """图片资源解析器实现"""

    def __init__(
        self,
        public_dir: Path,
        uploads_prefix: str = "/uploads/",
        asset_base_url: str | None = None,
    ):
        self.public_dir = Path(public_dir)
        self.uploads_prefix = uploads_prefix
        self.asset_host = urlsplit(asset_base_url).netloc if asset_base_url else None

    def is_local(self, url: str) -> bool:
        """是否为本地资源地址（含资源基址下的任意路径）"""
        if url.startswith(self.uploads_prefix):
            return True
        parts = urlsplit(url)
        return bool(self.asset_host) and parts.netloc == self.asset_host

    async def resolve(self, url: str) -> ResolvedAsset | None:
        """解析图片地址；非本地地址返回 None"""
        if url.startswith("data:"):
            return decode_data_uri(url)

        if not self.is_local(url):
            return None

        path = urlsplit(url).path
        if not path.startswith(self.uploads_prefix):
            raise AssetResolutionError(f"非上传目录资源: {path}")

        file_path = self._local_path(path)
        try:
            body = await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            raise AssetResolutionError(f"读取图片失败: {path}: {e}") from e

        return ResolvedAsset(content_type=guess_content_type(path), body=body)

    def _local_path(self, url_path: str) -> Path:
        """URL 路径 → 存储目录内的文件路径（禁止越界）"""
        root = self.public_dir.resolve()
        candidate = (root / unquote(url_path.lstrip("/"))).resolve()
        if not candidate.is_relative_to(root):
            raise AssetResolutionError(f"非法图片路径: {url_path}")
        return candidate
