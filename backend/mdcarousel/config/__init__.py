"""
配置层 - 加载运行期配置

职责：
- 加载 documents/runtime.yaml（运行期参数）
- 提供类型安全的配置访问接口
- 初始化日志输出
"""

from .logging_config import setup_logging
from .runtime_config import RuntimeConfig, get_config, reload_config

__all__ = [
    "RuntimeConfig",
    "get_config",
    "reload_config",
    "setup_logging",
]
