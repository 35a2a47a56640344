"""
配置管理
========

提供串口和固件更新相关的配置类。
"""

from dataclasses import dataclass
import serial

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_HANDSHAKE_ATTEMPTS,
    MAX_PAYLOAD_LENGTH,
    ROW_ADDRESS_SIZE,
)


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 超时时间

    def __post_init__(self):
        """参数验证"""
        if not self.port:
            raise ValueError("port不能为空")
        if self.baudrate <= 0:
            raise ValueError("baudrate必须大于0")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout不能为负数")

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }


@dataclass
class UpdateConfig:
    """固件更新配置类"""

    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE  # 单帧携带的最大行数据长度
    max_attempts: int = DEFAULT_MAX_ATTEMPTS  # 每条命令的最大尝试次数
    retry_delay: float = DEFAULT_RETRY_DELAY  # 重试间隔(秒)
    handshake_attempts: int = DEFAULT_HANDSHAKE_ATTEMPTS  # 握手应答读取次数
    verify_row_checksums: bool = True  # 解析镜像时校验行校验和
    show_progress: bool = False  # 是否显示进度

    def __post_init__(self):
        """参数验证"""
        # ProgramRow 还要携带3字节行地址
        max_allowed = MAX_PAYLOAD_LENGTH - ROW_ADDRESS_SIZE
        if not 1 <= self.max_chunk_size <= max_allowed:
            raise ValueError(f"max_chunk_size必须在 1 到 {max_allowed} 之间")
        if self.max_attempts < 1:
            raise ValueError("max_attempts必须大于0")
        if self.handshake_attempts < 1:
            raise ValueError("handshake_attempts必须大于0")
        if self.retry_delay < 0:
            raise ValueError("retry_delay不能为负数")
