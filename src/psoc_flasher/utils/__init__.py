"""
工具模块
========

包含日志记录、进度显示和重试等工具功能。
"""

from .logger import get_logger, setup_logger, set_level
from .progress import ProgressBar
from .retry import retry_call, RETRYABLE_ERRORS

__all__ = [
    "get_logger",
    "setup_logger",
    "set_level",
    "ProgressBar",
    "retry_call",
    "RETRYABLE_ERRORS",
]
