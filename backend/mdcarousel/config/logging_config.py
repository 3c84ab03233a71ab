"""
日志配置 - 按 LoggingConfig 初始化 logging

各模块统一使用 logging.getLogger(__name__)，此处只负责根 logger 的级别与输出。
"""

from __future__ import annotations

import logging

from .runtime_config import RuntimeConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(config: RuntimeConfig) -> logging.Logger:
    """配置 mdcarousel 命名空间的日志输出"""
    logger = logging.getLogger("mdcarousel")
    logger.setLevel(config.logging.log_level.upper())

    # 重复调用时不叠加 handler
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if config.logging.log_to_file:
        config.logging.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            config.logging.log_dir / "carousel.log", encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
