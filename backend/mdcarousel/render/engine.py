"""
渲染引擎池 - 进程级共享的无头浏览器

职责：
1. 惰性启动浏览器（并发首次调用只启动一次）
2. 每个渲染任务独占一个浏览器上下文（互不共享 DOM/布局状态）
3. 会话引用计数；累计会话数达到阈值且空闲时重启浏览器
4. 关闭时释放浏览器与 Playwright 进程（异常路径同样释放）

依赖：
- playwright: Chromium 无头渲染

使用方式：
    pool = EnginePool.from_config(config)
    async with pool.session(viewport={"width": 1080, "height": 1440}) as page:
        await page.set_content(html)
    await pool.close()
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..interfaces import EngineError

logger = logging.getLogger(__name__)


class EnginePool:
    """共享浏览器引擎"""

    def __init__(
        self,
        browser: str = "chromium",
        headless: bool = True,
        launch_args: list[str] | None = None,
        launch_timeout_sec: float = 60,
        recycle_after: int = 0,
    ):
        self.browser_name = browser
        self.headless = headless
        self.launch_args = launch_args or []
        self.launch_timeout_sec = launch_timeout_sec
        self.recycle_after = recycle_after

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()
        self._active = 0
        self._served = 0
        self.launch_count = 0

    @classmethod
    def from_config(cls, config) -> EnginePool:
        return cls(
            browser=config.engine.browser,
            headless=config.engine.headless,
            launch_args=config.engine.launch_args,
            launch_timeout_sec=config.timeouts.engine_launch_sec,
            recycle_after=config.engine.recycle_after,
        )

    @property
    def started(self) -> bool:
        return self._browser is not None

    @property
    def active_sessions(self) -> int:
        return self._active

    async def _launch(self) -> Browser:
        """启动 Playwright 与浏览器"""
        logger.info(f"启动渲染引擎: {self.browser_name} headless={self.headless}")
        self._playwright = await async_playwright().start()
        try:
            launcher = getattr(self._playwright, self.browser_name)
            browser = await launcher.launch(
                headless=self.headless,
                args=self.launch_args,
                timeout=self.launch_timeout_sec * 1000,
            )
        except Exception:
            await self._stop_playwright()
            raise
        self.launch_count += 1
        return browser

    async def get_browser(self) -> Browser:
        """获取浏览器（必要时启动或回收重启）"""
        async with self._lock:
            if self._browser is not None and self._needs_recycle():
                logger.info(f"渲染引擎已服务 {self._served} 个会话，重启回收")
                await self._shutdown()
            if self._browser is None or not self._browser.is_connected():
                if self._browser is not None:
                    logger.warning("渲染引擎连接已断开，重新启动")
                    await self._shutdown()
                try:
                    self._browser = await self._launch()
                except Exception as e:
                    raise EngineError(f"渲染引擎启动失败: {e}") from e
                self._served = 0
            return self._browser

    def _needs_recycle(self) -> bool:
        return (
            self.recycle_after > 0
            and self._served >= self.recycle_after
            and self._active == 0
        )

    @asynccontextmanager
    async def session(self, **context_options: Any) -> AsyncIterator[Page]:
        """独立浏览器上下文中的单个页面，退出时关闭上下文"""
        browser = await self.get_browser()
        self._active += 1
        self._served += 1
        context = None
        try:
            context = await browser.new_context(**context_options)
            page = await context.new_page()
            yield page
        finally:
            self._active -= 1
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"关闭浏览器上下文失败: {e}")

    async def close(self) -> None:
        """关闭引擎"""
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"关闭浏览器失败: {e}")
            self._browser = None
            logger.info("渲染引擎已关闭")
        await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"停止 Playwright 失败: {e}")
            self._playwright = None

    async def __aenter__(self) -> EnginePool:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
