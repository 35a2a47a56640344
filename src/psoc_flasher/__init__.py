"""
PSoC 串口固件烧写工具
=====================

通过串口与 Bootloader 通信，把 .cyacd 固件镜像烧写到微控制器。

主要功能：
- Bootloader 命令帧封装与校验
- .cyacd 镜像解析与行校验
- 带重试的逐行烧写
- 保证退出 Bootloader 的会话管理
"""

__version__ = "1.0.0"
__description__ = "通过串口 Bootloader 烧写 PSoC 固件"

# 导出主要类
from .config.constants import CommandCode, UnrecognizedCode
from .config.settings import SerialConfig, UpdateConfig
from .core.frame_handler import Command, FrameHandler
from .firmware.cyacd import FirmwareImage, FlashRow, parse_image, load_image
from .updater.session import UpdateSession
from .updater.boundary import ErrorSlot, UpdateStatus, update_device

__all__ = [
    "CommandCode",
    "UnrecognizedCode",
    "SerialConfig",
    "UpdateConfig",
    "Command",
    "FrameHandler",
    "FirmwareImage",
    "FlashRow",
    "parse_image",
    "load_image",
    "UpdateSession",
    "ErrorSlot",
    "UpdateStatus",
    "update_device",
]
