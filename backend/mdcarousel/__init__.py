"""
Markdown 图片轮播生成 - 后端核心模块

模块结构：
- config/     运行期配置与日志
- models/     数据模型定义
- render/     单页渲染（分页/字号/Markdown转换/样式/图片解析/截图）
- pipeline/   批量编排与打包
- services/   上传与内容生成
- api/        FastAPI 接口层
"""

__version__ = "0.1.0"
