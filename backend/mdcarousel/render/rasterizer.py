"""
光栅渲染器 - 单页 HTML → 1080×1440 PNG

职责：
1. 从引擎池获取独立会话（视口=画布尺寸，设备像素比 1）
2. 拦截图片请求，交给 AssetResolver 直接提供字节
3. 加载页面并按画布边界精确截图

失败（引擎启动/页面加载/截图）统一抛出 RenderError，携带页序与阶段。

测试要点：
- test_render_clip_matches_canvas: 截图区域与画布一致
- test_route_fulfills_local_asset: 本地图片直接响应
- test_route_aborts_on_resolution_error: 图片解析失败仅放弃该图片
- test_render_error_carries_page_index: 错误携带页序
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from ..interfaces import AssetResolutionError, IAssetResolver, IRasterRenderer, RenderError

if TYPE_CHECKING:
    from playwright.async_api import Request, Route

    from ..models import RenderJob
    from .engine import EnginePool

logger = logging.getLogger(__name__)


class RasterRenderer(IRasterRenderer):
    """光栅渲染器实现"""

    def __init__(self, pool: EnginePool, resolver: IAssetResolver):
        self.pool = pool
        self.resolver = resolver

    async def render(self, job: RenderJob) -> bytes:
        """渲染单页，返回 PNG 字节"""
        index = job.page_index
        stage = "launch"
        try:
            async with self.pool.session(
                viewport={"width": job.canvas_width, "height": job.canvas_height},
                device_scale_factor=job.device_scale_factor,
            ) as page:
                stage = "navigate"
                await page.route("**/*", self.route_handler(index))
                await page.set_content(job.html, wait_until="load")

                stage = "capture"
                image = await page.screenshot(
                    type="png",
                    full_page=False,
                    clip={
                        "x": 0,
                        "y": 0,
                        "width": job.canvas_width,
                        "height": job.canvas_height,
                    },
                )
        except RenderError:
            raise
        except Exception as e:
            logger.error(f"第{index + 1}页渲染失败[{stage}]: {e}")
            raise RenderError(index, str(e), stage) from e

        logger.debug(f"第{index + 1}页渲染完成 ({len(image)} bytes)")
        return image

    def route_handler(self, index: int) -> Callable[[Route, Request], Awaitable[None]]:
        """生成请求拦截回调（图片解析失败只影响该图片）"""

        async def handle(route: Route, request: Request) -> None:
            url = request.url
            try:
                asset = await self.resolver.resolve(url)
            except AssetResolutionError as e:
                logger.warning(f"第{index + 1}页图片加载失败，已跳过: {e}")
                await route.abort()
                return

            if asset is None:
                await route.continue_()
                return

            await route.fulfill(status=200, content_type=asset.content_type, body=asset.body)

        return handle
