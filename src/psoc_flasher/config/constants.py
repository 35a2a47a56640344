"""
系统常量定义
============

定义 Bootloader 通信协议中使用的命令字、帧格式和默认参数。
"""

from dataclasses import dataclass
from enum import IntEnum
import struct
from typing import Final, Union


class CommandCode(IntEnum):
    """Bootloader 命令字枚举"""

    # 状态/错误码
    SUCCESS = 0x00
    VERIFICATION_ERROR = 0x02
    LENGTH_ERROR = 0x03
    DATA_ERROR = 0x04
    COMMAND_ERROR = 0x05
    DEVICE_ERROR = 0x06
    VERSION_ERROR = 0x07
    CHECKSUM_ERROR = 0x08
    FLASH_ARRAY_ERROR = 0x09
    ROW_ERROR = 0x0A
    APP_ERROR = 0x0C
    ACTIVE_ERROR = 0x0D
    UNKNOWN_ERROR = 0x0F

    # 操作命令
    VERIFY_CHECKSUM = 0x31
    GET_FLASH_SIZE = 0x32
    GET_APP_STATUS = 0x33
    ERASE_ROW = 0x34
    SYNC_BOOTLOADER = 0x35
    SET_ACTIVE_APP = 0x36
    SEND_DATA = 0x37
    ENTER_BOOTLOADER = 0x38
    PROGRAM_ROW = 0x39
    VERIFY_ROW = 0x3A
    EXIT_BOOTLOADER = 0x3B

    @property
    def is_error(self) -> bool:
        """是否为设备返回的错误码"""
        return self.value < 0x10 and self is not CommandCode.SUCCESS

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnrecognizedCode:
    """协议中未定义的命令字，保留原始字节值"""

    raw: int

    @property
    def is_error(self) -> bool:
        return True

    def __int__(self) -> int:
        return self.raw

    def __str__(self) -> str:
        return f"UNRECOGNIZED(0x{self.raw:02x})"


AnyCode = Union[CommandCode, UnrecognizedCode]


def to_command_code(raw: int) -> AnyCode:
    """
    将线路上的命令字字节映射为命令字

    未定义的值不会被归入任何已知命令字，而是返回 UnrecognizedCode。

    Args:
        raw: 命令字字节(0-255)

    Returns:
        CommandCode 成员或 UnrecognizedCode
    """
    try:
        return CommandCode(raw)
    except ValueError:
        return UnrecognizedCode(raw)


# 帧边界标记
START_BYTE: Final[int] = 0x01
END_BYTE: Final[int] = 0x17

# 数据帧格式定义
FRAME_HEADER_FORMAT: Final[str] = "<BBH"  # 起始字节(1) + 命令字(1) + 数据长度(2)
FRAME_TRAILER_FORMAT: Final[str] = "<HB"  # 校验和(2) + 结束字节(1)

FRAME_HEADER_SIZE: Final[int] = struct.calcsize(FRAME_HEADER_FORMAT)
FRAME_TRAILER_SIZE: Final[int] = struct.calcsize(FRAME_TRAILER_FORMAT)
FRAME_OVERHEAD: Final[int] = FRAME_HEADER_SIZE + FRAME_TRAILER_SIZE  # 7字节

# 长度字段为16位
MAX_PAYLOAD_LENGTH: Final[int] = 0xFFFF

# ProgramRow 负载前缀：阵列号(1) + 行号(2, 小端)
ROW_ADDRESS_FORMAT: Final[str] = "<BH"
ROW_ADDRESS_SIZE: Final[int] = struct.calcsize(ROW_ADDRESS_FORMAT)

# 单帧物理长度为64字节
PHYSICAL_FRAME_SIZE: Final[int] = 64
DEFAULT_MAX_CHUNK_SIZE: Final[int] = PHYSICAL_FRAME_SIZE - FRAME_OVERHEAD  # 57

# 握手应答中硅片ID为4字节小端
SILICON_ID_FORMAT: Final[str] = "<I"
SILICON_ID_SIZE: Final[int] = struct.calcsize(SILICON_ID_FORMAT)

# 串口配置默认值
DEFAULT_BAUDRATE: Final[int] = 115200  # 默认波特率
DEFAULT_TIMEOUT: Final[float] = 0.1  # 默认超时时间(秒)

# 重试配置默认值
DEFAULT_MAX_ATTEMPTS: Final[int] = 5  # 每条命令的最大尝试次数
DEFAULT_RETRY_DELAY: Final[float] = 0.4  # 两次尝试之间的固定等待(秒)
DEFAULT_HANDSHAKE_ATTEMPTS: Final[int] = 5  # 握手应答最大读取次数
