"""
页面编排器 - 文档 → 有序 PNG 列表

职责：
1. 拆分页面、替换图片占位符、计算字号、转换 HTML
2. 固定并发的工作协程从队列取任务渲染（单页超时）
3. 更新批次进度（已完成页数单调递增）
4. 按页序汇总结果，按失败策略确定批次状态

测试要点：
- test_results_keep_page_order: 完成顺序与页序不同时结果仍按页序
- test_concurrency_bounded: 同时渲染数不超过 max_workers
- test_fail_fast: 任一页失败整批失败
- test_partial_policy: 逐页状态
- test_retry_failed: 只重试失败页
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Mapping

from ..config import get_config
from ..interfaces import BatchError, RenderError, ValidationError
from ..models import BatchProgress, BatchStatus, GenerationBatch, Page, RenderJob
from ..render import (
    MarkdownTranscoder,
    PageSplitter,
    StyleSheetGenerator,
    TypographyScaler,
    substitute,
)

if TYPE_CHECKING:
    from ..config import RuntimeConfig
    from ..interfaces import IRasterRenderer, ITranscoder
    from ..render.placeholders import PlaceholderValue

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BatchProgress], None]


class PageOrchestrator:
    """页面编排器"""

    def __init__(
        self,
        renderer: IRasterRenderer,
        config: RuntimeConfig | None = None,
        *,
        splitter: PageSplitter | None = None,
        scaler: TypographyScaler | None = None,
        transcoder: ITranscoder | None = None,
        stylesheet: StyleSheetGenerator | None = None,
    ):
        self.config = config or get_config()
        self.renderer = renderer

        pagination = self.config.pagination
        self.splitter = splitter or PageSplitter(
            delimiter=pagination.delimiter,
            page_break_marker=pagination.page_break_marker,
            strict_marker=pagination.strict_marker,
        )
        self.scaler = scaler or TypographyScaler()
        self.transcoder = transcoder or MarkdownTranscoder()
        self.stylesheet = stylesheet or StyleSheetGenerator(
            width=self.config.canvas.width,
            height=self.config.canvas.height,
            code_css=self.transcoder.code_css(),
            base_href=self.config.engine.asset_base_url,
        )

        self.max_workers = max(1, self.config.concurrency.max_workers)
        self.timeout = self.config.timeouts.render_job_sec or None
        self.fail_fast = self.config.pipeline.failure_policy == "fail_fast"

    # ------------------------------------------------------------------
    # 准备
    # ------------------------------------------------------------------

    def prepare(
        self,
        document: str,
        placeholders: Mapping[str, PlaceholderValue] | None = None,
    ) -> list[Page]:
        """拆分并预处理全部页面"""
        sources = self.splitter.split(document)
        if not sources:
            raise ValidationError("Markdown 内容不能为空")

        max_pages = self.config.pipeline.max_pages
        if max_pages and len(sources) > max_pages:
            raise ValidationError(f"页数超出上限: {len(sources)} > {max_pages}")

        return [self.prepare_page(i, src, placeholders) for i, src in enumerate(sources)]

    def prepare_page(
        self,
        index: int,
        source: str,
        placeholders: Mapping[str, PlaceholderValue] | None = None,
    ) -> Page:
        """预处理单页：替换占位符 → 字号 → HTML"""
        resolved = substitute(source, placeholders)
        return Page(
            index=index,
            source_text=source,
            resolved_text=resolved,
            font_scale=self.scaler.scale(source),
            rendered_markup=self.transcoder.render(resolved),
        )

    def build_job(self, page: Page) -> RenderJob:
        """页面 → 渲染任务"""
        canvas = self.config.canvas
        params = self.stylesheet.params(page.font_scale)
        return RenderJob(
            page=page,
            canvas_width=canvas.width,
            canvas_height=canvas.height,
            device_scale_factor=canvas.device_scale_factor,
            style=params,
            html=self.stylesheet.document(page.rendered_markup, params),
        )

    # ------------------------------------------------------------------
    # 执行
    # ------------------------------------------------------------------

    async def run(
        self,
        document: str,
        placeholders: Mapping[str, PlaceholderValue] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationBatch:
        """渲染整篇文档，返回批次（不抛出页面级错误）"""
        batch = GenerationBatch.for_pages(self.prepare(document, placeholders))
        await self.execute(batch, on_progress=on_progress)
        return batch

    async def render_document(
        self,
        document: str,
        placeholders: Mapping[str, PlaceholderValue] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[bytes]:
        """渲染整篇文档，全部成功时返回按页序排列的 PNG"""
        batch = await self.run(document, placeholders, on_progress)
        batch.raise_for_status()
        if batch.status != BatchStatus.SUCCEEDED:
            pages = ", ".join(str(i + 1) for i in batch.failed_indices)
            raise BatchError(f"部分页面渲染失败(失败页: {pages})", failed=batch.failed_indices)
        return batch.ordered_images()

    async def render_single(self, markdown: str) -> bytes:
        """整段 Markdown 作为单页渲染（不分页）"""
        if not markdown or not markdown.strip():
            raise ValidationError("Markdown 内容不能为空")
        job = self.build_job(self.prepare_page(0, markdown.strip()))
        return await self._render_with_timeout(job)

    async def retry_failed(
        self,
        batch: GenerationBatch,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationBatch:
        """只重新渲染未完成的页面"""
        indices = batch.pending_indices
        if not indices:
            return batch
        logger.info(f"[{batch.batch_id}] 重试 {len(indices)} 页: {[i + 1 for i in indices]}")
        batch.reset_for_retry(indices)
        await self.execute(batch, indices=indices, on_progress=on_progress)
        return batch

    async def execute(
        self,
        batch: GenerationBatch,
        indices: list[int] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """固定数量工作协程消费渲染队列"""
        targets = list(range(batch.total)) if indices is None else indices
        batch.mark_running()
        workers_n = min(self.max_workers, len(targets))
        logger.info(f"[{batch.batch_id}] 开始渲染 {len(targets)} 页 (并发 {workers_n})")

        queue: asyncio.Queue[RenderJob] = asyncio.Queue()
        for i in targets:
            queue.put_nowait(self.build_job(batch.pages[i]))

        abort = asyncio.Event()

        async def worker() -> None:
            while True:
                try:
                    job = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                if abort.is_set():
                    # 整批已失败，剩余页面不再渲染
                    continue
                await self._run_job(batch, job, abort, on_progress)

        tasks = [asyncio.create_task(worker()) for _ in range(workers_n)]
        try:
            await asyncio.gather(*tasks)
        finally:
            for t in tasks:
                t.cancel()
            batch.finalize(self.fail_fast)

        if batch.status == BatchStatus.SUCCEEDED:
            logger.info(f"[{batch.batch_id}] 渲染完成: {batch.total} 页")
        else:
            logger.error(
                f"[{batch.batch_id}] 渲染结束 status={batch.status.value} "
                f"失败页={[i + 1 for i in batch.failed_indices]}"
            )

    async def _run_job(
        self,
        batch: GenerationBatch,
        job: RenderJob,
        abort: asyncio.Event,
        on_progress: ProgressCallback | None,
    ) -> None:
        """执行单页任务并记录结果"""
        index = job.page_index
        job.page.mark_rendering()
        try:
            image = await self._render_with_timeout(job)
        except RenderError as e:
            batch.record_failure(index, str(e))
            if self.fail_fast:
                abort.set()
        except Exception as e:
            logger.exception(f"[{batch.batch_id}] 第{index + 1}页渲染异常")
            batch.record_failure(index, f"第{index + 1}页渲染异常: {e}")
            if self.fail_fast:
                abort.set()
        else:
            batch.record_success(index, image)

        self._notify(batch, on_progress)

    async def _render_with_timeout(self, job: RenderJob) -> bytes:
        try:
            return await asyncio.wait_for(self.renderer.render(job), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise RenderError(job.page_index, f"超时({self.timeout}s)", "timeout") from e

    def _notify(self, batch: GenerationBatch, on_progress: ProgressCallback | None) -> None:
        progress = batch.progress
        logger.debug(
            f"[{batch.batch_id}] 进度 {progress.completed}/{progress.total} ({progress.percent}%)"
        )
        if on_progress is None:
            return
        try:
            on_progress(progress.model_copy())
        except Exception:
            # 进度回调只做通知，不影响渲染结果
            logger.exception(f"[{batch.batch_id}] 进度回调异常")
