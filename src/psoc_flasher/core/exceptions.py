"""
异常定义
========

Bootloader 协议、镜像解析和更新会话中使用的异常类型。
"""

from typing import Optional


class BootloaderError(Exception):
    """所有 psoc_flasher 异常的基类"""

    pass


class FramingError(BootloaderError):
    """数据帧起始/结束字节不正确或帧结构损坏"""

    pass


class ChecksumMismatch(BootloaderError):
    """数据帧校验和与计算值不一致"""

    def __init__(self, received: int, calculated: int):
        super().__init__(
            f"校验和错误: 接收=0x{received:04x}, 计算=0x{calculated:04x}"
        )
        self.received = received
        self.calculated = calculated


class TransportError(BootloaderError, IOError):
    """串口读写失败（超时、短读、设备断开等）"""

    pass


class FormatError(BootloaderError, ValueError):
    """固件镜像文件格式错误"""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"第{line_number}行: {message}"
        super().__init__(message)
        self.line_number = line_number


class RowChecksumError(FormatError):
    """镜像数据行的校验和不正确"""

    pass


class SiliconMismatch(BootloaderError):
    """镜像的硅片ID与设备不匹配"""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"镜像适用于其他芯片: 镜像=0x{actual:08x}, 设备=0x{expected:08x}"
        )
        self.expected = expected
        self.actual = actual


class ProtocolFailure(BootloaderError):
    """设备应答的命令字不是 SUCCESS"""

    def __init__(self, message: str, code=None):
        super().__init__(message)
        self.code = code


class RetryExhausted(BootloaderError):
    """重试次数耗尽，携带最后一次的错误"""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        super().__init__(f"尝试{attempts}次后仍然失败: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class ConfigurationError(BootloaderError, ValueError):
    """参数配置错误"""

    pass


class SessionStateError(BootloaderError):
    """在错误的会话状态下调用操作"""

    pass


class SessionCloseWarning(UserWarning):
    """发送 ExitBootloader 失败（只记录日志，不抛出）"""

    pass
