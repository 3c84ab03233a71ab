"""
命令行入口

用法：
    mdcarousel render note.md -o out/            # 逐页输出 page-N.png
    mdcarousel render note.md -o out.zip --zip   # 打包为 zip
    mdcarousel serve --port 8000                 # 启动 HTTP 接口
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .config import RuntimeConfig, get_config, setup_logging
from .interfaces import CarouselError
from .models import BatchProgress
from .pipeline import ARCHIVE_NAME, ArchiveExporter, PageOrchestrator, page_filename
from .render import AssetResolver, EnginePool, RasterRenderer

logger = logging.getLogger(__name__)


async def render_file(config: RuntimeConfig, input_path: Path, output: Path, as_zip: bool) -> list[Path]:
    """渲染 Markdown 文件，返回输出路径"""
    document = input_path.read_text(encoding="utf-8")

    def _progress(p: BatchProgress) -> None:
        print(f"  已完成 {p.completed}/{p.total} ({p.percent}%)")

    async with EnginePool.from_config(config) as pool:
        resolver = AssetResolver(
            public_dir=config.storage.public_dir,
            uploads_prefix=config.storage.uploads_prefix,
            asset_base_url=config.engine.asset_base_url,
        )
        orchestrator = PageOrchestrator(RasterRenderer(pool, resolver), config)
        images = await orchestrator.render_document(document, on_progress=_progress)

    if as_zip:
        target = output if output.suffix == ".zip" else output / ARCHIVE_NAME
        exporter = ArchiveExporter(config.canvas.width, config.canvas.height)
        return [exporter.write(images, target)]

    output.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, image in enumerate(images):
        path = output / page_filename(i)
        path.write_bytes(image)
        paths.append(path)
    return paths


def _cmd_render(args: argparse.Namespace, config: RuntimeConfig) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"输入文件不存在: {input_path}")
        return 1
    try:
        paths = asyncio.run(render_file(config, input_path, Path(args.output), args.zip))
    except CarouselError as exc:
        print(f"渲染失败: {exc}")
        return 1
    for path in paths:
        print(f"输出: {path}")
    return 0


def _cmd_serve(args: argparse.Namespace, config: RuntimeConfig) -> int:
    import uvicorn

    from .api import create_app

    config.ensure_dirs()
    uvicorn.run(create_app(config), host=args.host, port=args.port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdcarousel",
        description="Markdown 转 1080×1440 图片轮播",
    )
    parser.add_argument("--config", default="", help="运行期配置 YAML（默认：documents/runtime.yaml）")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="渲染 Markdown 文件")
    render.add_argument("input", help="Markdown 文件路径")
    render.add_argument("-o", "--output", default="out", help="输出目录或 zip 路径（默认：out）")
    render.add_argument("--zip", action="store_true", help="打包为 zip")
    render.set_defaults(func=_cmd_render)

    serve = sub.add_parser("serve", help="启动 HTTP 接口")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = RuntimeConfig.from_yaml(args.config) if args.config else get_config()
    setup_logging(config)
    return args.func(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
