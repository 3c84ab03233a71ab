"""
接口层 - FastAPI 应用
"""

from .app import batch_response, create_app

__all__ = [
    "create_app",
    "batch_response",
]
