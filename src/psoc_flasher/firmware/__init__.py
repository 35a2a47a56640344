"""
固件镜像模块
============

.cyacd 固件镜像的数据结构与解析。
"""

from .cyacd import FlashRow, FirmwareImage, parse_image, load_image

__all__ = [
    "FlashRow",
    "FirmwareImage",
    "parse_image",
    "load_image",
]
