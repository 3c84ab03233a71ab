"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(runtime_config, fake_renderer):
        orchestrator = PageOrchestrator(fake_renderer, runtime_config)
"""

from __future__ import annotations

import asyncio
import base64
import struct
import tempfile
import zlib
from pathlib import Path
from typing import Generator

import pytest

from mdcarousel.config import RuntimeConfig
from mdcarousel.interfaces import IRasterRenderer, RenderError
from mdcarousel.models import Page, RenderJob, StyleParams


# ============================================================================
# 图片工具
# ============================================================================

def make_png(width: int = 1, height: int = 1) -> bytes:
    """生成最小合法 PNG（白色）"""

    def chunk(tag: bytes, data: bytes) -> bytes:
        body = tag + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    raw = b"".join(b"\x00" + b"\xff\xff\xff" * width for _ in range(height))
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
        + chunk(b"IDAT", zlib.compress(raw))
        + chunk(b"IEND", b"")
    )


def png_size(data: bytes) -> tuple[int, int]:
    """读取 PNG IHDR 中的宽高"""
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    return struct.unpack(">II", data[16:24])


# ============================================================================
# 渲染替身
# ============================================================================

class FakeRenderer(IRasterRenderer):
    """渲染替身：按页序可设置延迟/失败，记录并发峰值"""

    def __init__(
        self,
        delays: dict[int, float] | None = None,
        fail_pages: set[int] | None = None,
    ):
        self.delays = delays or {}
        self.fail_pages = set(fail_pages or ())
        self.calls: list[int] = []
        self.finished: list[int] = []
        self.jobs: list[RenderJob] = []
        self.active = 0
        self.peak = 0

    async def render(self, job: RenderJob) -> bytes:
        index = job.page_index
        self.calls.append(index)
        self.jobs.append(job)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delays.get(index, 0))
            if index in self.fail_pages:
                raise RenderError(index, "模拟失败", "capture")
            self.finished.append(index)
            # 图片内容携带页序，便于校验顺序
            return b"PNG-" + str(index).encode()
        finally:
            self.active -= 1


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（存储目录指向临时目录）"""
    config = RuntimeConfig()
    config.storage.public_dir = temp_dir / "public"
    config.timeouts.render_job_sec = 5
    return config


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


# ============================================================================
# 数据 Fixtures
# ============================================================================

@pytest.fixture
def sample_page() -> Page:
    return Page(index=0, source_text="# Hello (World)", font_scale=60)


@pytest.fixture
def sample_job(sample_page: Page) -> RenderJob:
    return RenderJob(
        page=sample_page,
        style=StyleParams.from_base(sample_page.font_scale),
        html="<html><body><h1>Hello</h1></body></html>",
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png(2, 2)


@pytest.fixture
def png_data_uri(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def sample_document() -> str:
    return "# Hello (World)\n\nbody text\n---\n# Page2"
