"""重试工具
==========

提供固定间隔的有限次重试辅助函数。

Bootloader 协议是低速半双工的一问一答，失败后等待固定的稳定时间再重试即可，
不需要指数退避和抖动。
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..config.constants import DEFAULT_RETRY_DELAY
from ..core.exceptions import (
    ChecksumMismatch,
    ConfigurationError,
    FramingError,
    ProtocolFailure,
    RetryExhausted,
    TransportError,
)

_T = TypeVar("_T")

RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    FramingError,
    ChecksumMismatch,
    TransportError,
    ProtocolFailure,
)


def retry_call(
    func: Callable[[int], _T],
    *,
    max_attempts: int,
    delay: float = DEFAULT_RETRY_DELAY,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
    logger=None,
    log_level: int = logging.WARNING,
) -> _T:
    """带固定间隔的同步重试调用

    Args:
        func: 接收尝试序号(从0开始)的可调用对象，抛出异常即视为失败
        max_attempts: 最大尝试次数
        delay: 两次尝试之间的等待时间，秒
        retry_on: 可重试的异常类型，其他异常直接向上抛出
        logger: 可选日志记录器
        log_level: 记录每次失败时使用的日志级别

    Returns:
        func 第一次成功时的返回值

    Raises:
        ConfigurationError: max_attempts 小于1，此时 func 不会被调用
        RetryExhausted: 所有尝试均失败，last_error 为最后一次的异常
    """
    if max_attempts < 1:
        raise ConfigurationError("不能以0次尝试执行函数")

    last_error: Optional[BaseException] = None
    for attempt in range(max_attempts):
        try:
            return func(attempt)
        except retry_on as e:
            last_error = e
            if logger:
                logger.log(log_level, f"第{attempt + 1}/{max_attempts}次尝试失败: {e}")
            if attempt + 1 < max_attempts:
                time.sleep(delay)

    raise RetryExhausted(max_attempts, last_error) from last_error
