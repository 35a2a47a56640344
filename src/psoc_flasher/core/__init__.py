"""
核心模块
========

包含数据帧处理、串口管理、校验算法和异常定义等核心功能。
"""

from .frame_handler import Command, FrameHandler
from .checksum import calculate_checksum, calculate_row_checksum
from .serial_manager import SerialManager
from .exceptions import (
    BootloaderError,
    FramingError,
    ChecksumMismatch,
    TransportError,
    FormatError,
    RowChecksumError,
    SiliconMismatch,
    ProtocolFailure,
    RetryExhausted,
    ConfigurationError,
    SessionStateError,
    SessionCloseWarning,
)

__all__ = [
    "Command",
    "FrameHandler",
    "calculate_checksum",
    "calculate_row_checksum",
    "SerialManager",
    "BootloaderError",
    "FramingError",
    "ChecksumMismatch",
    "TransportError",
    "FormatError",
    "RowChecksumError",
    "SiliconMismatch",
    "ProtocolFailure",
    "RetryExhausted",
    "ConfigurationError",
    "SessionStateError",
    "SessionCloseWarning",
]
