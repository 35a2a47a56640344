"""
配置模块
=======

包含协议常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "CommandCode",
    "UnrecognizedCode",
    "to_command_code",
    "START_BYTE",
    "END_BYTE",
    "FRAME_OVERHEAD",
    "MAX_PAYLOAD_LENGTH",
    "DEFAULT_MAX_CHUNK_SIZE",
    "DEFAULT_BAUDRATE",
    "DEFAULT_TIMEOUT",
    # 配置
    "SerialConfig",
    "UpdateConfig",
]
