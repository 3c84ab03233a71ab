"""
HTTP 接口层 - FastAPI 应用

接口：
- POST /convert        单段 Markdown → 单张 PNG（data: 地址）
- POST /convert/batch  整篇文档 → 逐页结果
- POST /export         整篇文档 → xhs-pages.zip
- POST /upload         图片上传（image/*，≤5MB）
- POST /generate       示例内容生成

错误统一返回 {"error": "..."}，输入错误 400，渲染错误 500。
渲染引擎随应用生命周期关闭；空输入不会启动引擎。
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from ..config import RuntimeConfig, get_config
from ..interfaces import CarouselError, IRasterRenderer, UploadError
from ..models import GenerationBatch
from ..pipeline import ARCHIVE_NAME, ArchiveExporter, PageOrchestrator
from ..render import AssetResolver, EnginePool, RasterRenderer
from ..render.placeholders import to_data_uri
from ..services import ContentGenerator, UploadStore
from .schemas import BatchRequest, BatchResponse, ConvertRequest, GenerateRequest, PageResult

logger = logging.getLogger(__name__)


def _png_data_uri(image: bytes) -> str:
    return to_data_uri(image, "image/png")


def batch_response(batch: GenerationBatch) -> BatchResponse:
    """批次 → 接口响应"""
    return BatchResponse(
        batch_id=batch.batch_id,
        status=batch.status.value,
        completed=batch.progress.completed,
        total=batch.progress.total,
        percent=batch.progress.percent,
        pages=[
            PageResult(
                index=page.index,
                status=page.status.value,
                font_scale=page.font_scale,
                image=_png_data_uri(image) if image is not None else None,
                error=page.error,
            )
            for page, image in zip(batch.pages, batch.images)
        ],
    )


def create_app(
    config: RuntimeConfig | None = None,
    renderer: IRasterRenderer | None = None,
) -> FastAPI:
    """创建应用（renderer 可注入替身，便于测试）"""
    config = config or get_config()

    pool = EnginePool.from_config(config)
    resolver = AssetResolver(
        public_dir=config.storage.public_dir,
        uploads_prefix=config.storage.uploads_prefix,
        asset_base_url=config.engine.asset_base_url,
    )
    orchestrator = PageOrchestrator(renderer or RasterRenderer(pool, resolver), config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await pool.close()

    app = FastAPI(title="mdcarousel", lifespan=lifespan)
    app.state.config = config
    app.state.pool = pool
    app.state.orchestrator = orchestrator
    app.state.exporter = ArchiveExporter(config.canvas.width, config.canvas.height)
    app.state.uploads = UploadStore.from_config(config)
    app.state.generator = ContentGenerator()

    @app.exception_handler(CarouselError)
    async def handle_carousel_error(request: Request, exc: CarouselError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} 处理失败: {exc}")
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"error": "请求格式错误"}, status_code=400)

    @app.post("/convert")
    async def convert(req: ConvertRequest) -> dict[str, str]:
        image = await orchestrator.render_single(req.markdown)
        return {"image": _png_data_uri(image)}

    @app.post("/convert/batch", response_model=BatchResponse)
    async def convert_batch(req: BatchRequest) -> BatchResponse:
        batch = await orchestrator.run(req.markdown, req.images)
        batch.raise_for_status()
        return batch_response(batch)

    @app.post("/export")
    async def export(req: BatchRequest) -> Response:
        images = await orchestrator.render_document(req.markdown, req.images)
        return Response(
            content=app.state.exporter.export(images),
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{ARCHIVE_NAME}"'},
        )

    @app.post("/upload")
    async def upload(file: UploadFile | None = File(None)) -> dict[str, str]:
        if file is None:
            raise UploadError("未上传文件")
        result = await app.state.uploads.receive(file)
        return {"url": result.url, "path": result.path}

    @app.post("/generate")
    async def generate(req: GenerateRequest) -> dict[str, str]:
        return {"content": app.state.generator.generate(req.prompt)}

    return app
