"""
批量渲染模型 - 单次文档提交的全部渲染结果

结果按页序存放，与完成顺序无关。
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..interfaces import BatchError
from .page import Page, PageStatus


class BatchStatus(str, Enum):
    """批次状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


class BatchProgress(BaseModel):
    """批次进度（completed 单调递增）"""
    completed: int = 0
    total: int = 0
    last_page: int | None = Field(None, description="最近完成的页码(1起)")

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 100
        return int(self.completed * 100 / self.total)


class GenerationBatch(BaseModel):
    """批次实体"""
    batch_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    pages: list[Page] = Field(default_factory=list)
    images: list[bytes | None] = Field(default_factory=list)

    status: BatchStatus = BatchStatus.QUEUED
    progress: BatchProgress = Field(default_factory=BatchProgress)
    errors: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def for_pages(cls, pages: list[Page]) -> GenerationBatch:
        """按页面列表初始化（结果槽位与页序一一对应）"""
        return cls(
            pages=pages,
            images=[None] * len(pages),
            progress=BatchProgress(total=len(pages)),
        )

    @property
    def total(self) -> int:
        return len(self.pages)

    @property
    def failed_indices(self) -> list[int]:
        return [p.index for p in self.pages if p.status == PageStatus.FAILED]

    def mark_running(self) -> None:
        """标记为运行中"""
        self.status = BatchStatus.RUNNING
        self.started_at = datetime.now()

    def record_success(self, index: int, image: bytes) -> None:
        """记录单页成功"""
        self.images[index] = image
        self.pages[index].mark_done()
        self._advance(index)

    def record_failure(self, index: int, error: str) -> None:
        """记录单页失败"""
        self.images[index] = None
        self.pages[index].mark_failed(error)
        self.errors.append(error)
        self._advance(index)

    @property
    def pending_indices(self) -> list[int]:
        """未完成（失败或未执行）的页序"""
        return [p.index for p in self.pages if p.status != PageStatus.DONE]

    def reset_for_retry(self, indices: list[int]) -> None:
        """重置指定页面，准备重新渲染（进度从已完成页数继续）"""
        for i in indices:
            self.pages[i].status = PageStatus.PENDING
            self.pages[i].error = None
            self.images[i] = None
        self.errors = []
        self.progress.completed = self.total - len(indices)
        self.status = BatchStatus.QUEUED
        self.finished_at = None

    def _advance(self, index: int) -> None:
        self.progress.completed += 1
        self.progress.last_page = index + 1

    def finalize(self, fail_fast: bool) -> None:
        """根据失败策略确定最终状态"""
        self.finished_at = datetime.now()
        if all(p.status == PageStatus.DONE for p in self.pages):
            self.status = BatchStatus.SUCCEEDED
        elif fail_fast or not any(p.status == PageStatus.DONE for p in self.pages):
            self.status = BatchStatus.FAILED
        else:
            self.status = BatchStatus.PARTIAL

    def raise_for_status(self) -> None:
        """整批失败时抛出 BatchError"""
        if self.status == BatchStatus.FAILED:
            failed = self.failed_indices
            pages = ", ".join(str(i + 1) for i in failed) or "-"
            raise BatchError(f"批量渲染失败(失败页: {pages})", failed=failed)

    def ordered_images(self) -> list[bytes]:
        """按页序返回成功的图片"""
        return [img for img in self.images if img is not None]
