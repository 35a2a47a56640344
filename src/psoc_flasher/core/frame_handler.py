"""
数据帧处理模块
==============

负责 Bootloader 命令帧的封装、解析和收发。

数据帧格式：
| 起始(1B)=0x01 | 命令字(1B) | 长度(2B) | 负载(NB) | 校验和(2B) | 结束(1B)=0x17 |

多字节整数均为小端，校验和覆盖起始字节到负载末尾。
"""

import io
import struct
from dataclasses import dataclass
import serial

from ..config.constants import (
    AnyCode,
    CommandCode,
    START_BYTE,
    END_BYTE,
    FRAME_HEADER_FORMAT,
    FRAME_TRAILER_FORMAT,
    FRAME_HEADER_SIZE,
    FRAME_TRAILER_SIZE,
    MAX_PAYLOAD_LENGTH,
    to_command_code,
)
from .checksum import calculate_checksum
from .exceptions import (
    ChecksumMismatch,
    ConfigurationError,
    FramingError,
    RetryExhausted,
    TransportError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Command:
    """一条 Bootloader 命令或应答"""

    code: AnyCode
    payload: bytes = b""

    def __post_init__(self):
        if len(self.payload) > MAX_PAYLOAD_LENGTH:
            raise ValueError(
                f"负载长度超出限制: {len(self.payload)} > {MAX_PAYLOAD_LENGTH}"
            )
        # 统一为不可变的 bytes
        object.__setattr__(self, "payload", bytes(self.payload))

    def __repr__(self) -> str:
        name = self.code.name if isinstance(self.code, CommandCode) else str(self.code)
        return f"Command({name}, payload={self.payload.hex() or '(empty)'})"


class FrameHandler:
    """数据帧处理器"""

    @staticmethod
    def pack_frame(command: Command) -> bytes:
        """
        将命令打包成数据帧

        Args:
            command: 要发送的命令

        Returns:
            打包后的数据帧

        Examples:
            >>> FrameHandler.pack_frame(Command(CommandCode.ENTER_BOOTLOADER)).hex()
            '01380000c7ff17'
        """
        header = struct.pack(
            FRAME_HEADER_FORMAT, START_BYTE, int(command.code), len(command.payload)
        )
        body = header + command.payload
        checksum = calculate_checksum(body)
        return body + struct.pack(FRAME_TRAILER_FORMAT, checksum, END_BYTE)

    @staticmethod
    def read_frame(port) -> Command:
        """
        从串口（或任何带 read(n) 的对象）读取并解析一个数据帧

        Args:
            port: 串口对象

        Returns:
            解析出的命令

        Raises:
            FramingError: 起始或结束字节不正确
            ChecksumMismatch: 校验和不一致
            TransportError: 读取失败或数据不足
        """
        start = _read_exact(port, 1)[0]
        if start != START_BYTE:
            raise FramingError(f"起始字节不匹配: 0x{start:02x}")

        rest = _read_exact(port, FRAME_HEADER_SIZE - 1)
        header = bytes([start]) + rest
        _, raw_code, length = struct.unpack(FRAME_HEADER_FORMAT, header)

        payload = _read_exact(port, length)

        received_checksum, end = struct.unpack(
            FRAME_TRAILER_FORMAT, _read_exact(port, FRAME_TRAILER_SIZE)
        )
        if end != END_BYTE:
            raise FramingError(f"结束字节不匹配: 0x{end:02x}")

        calculated_checksum = calculate_checksum(header + payload)
        if received_checksum != calculated_checksum:
            raise ChecksumMismatch(received_checksum, calculated_checksum)

        return Command(to_command_code(raw_code), payload)

    @staticmethod
    def unpack_frame(frame_data: bytes) -> Command:
        """
        解析一个完整的内存数据帧

        Args:
            frame_data: 完整数据帧

        Returns:
            解析出的命令

        Raises:
            FramingError: 帧结构错误或帧后有多余字节
            ChecksumMismatch: 校验和不一致
            TransportError: 数据不足一帧
        """
        buffer = io.BytesIO(frame_data)
        command = FrameHandler.read_frame(buffer)
        extra = len(frame_data) - buffer.tell()
        if extra:
            raise FramingError(f"数据帧后有{extra}个多余字节")
        return command

    @staticmethod
    def read_frame_with_retry(port, max_attempts: int) -> Command:
        """
        多次尝试读取数据帧，返回第一个有效的帧

        仅用于握手阶段，其上层没有命令级重试。

        Args:
            port: 串口对象
            max_attempts: 最大尝试次数

        Returns:
            解析出的命令

        Raises:
            ConfigurationError: max_attempts 小于1
            RetryExhausted: 所有尝试均失败
        """
        if max_attempts < 1:
            raise ConfigurationError("不能以0次尝试读取数据帧")

        last_error = None
        for attempt in range(max_attempts):
            try:
                return FrameHandler.read_frame(port)
            except (FramingError, ChecksumMismatch, TransportError) as e:
                logger.warning(f"第{attempt + 1}次读取数据帧失败: {e}")
                last_error = e

        raise RetryExhausted(max_attempts, last_error) from last_error

    @staticmethod
    def send_command(port, command: Command) -> None:
        """
        打包并发送一条命令

        Args:
            port: 串口对象
            command: 要发送的命令

        Raises:
            TransportError: 写入失败或未完整写入
        """
        frame = FrameHandler.pack_frame(command)
        try:
            written = port.write(frame)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"写入数据帧失败: {e}") from e

        # 部分串口实现 write() 返回 None
        if written is not None and written != len(frame):
            raise TransportError(f"写入不完整: {written}/{len(frame)}字节")

        logger.debug(f"已发送 {command!r}")

    @staticmethod
    def discard_input(port) -> None:
        """
        丢弃接收缓冲区中尚未读取的数据

        重发命令前调用，避免读到上一次尝试残留或迟到的应答。

        Raises:
            TransportError: 清空缓冲区失败
        """
        try:
            port.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"清空接收缓冲区失败: {e}") from e


def _read_exact(port, size: int) -> bytes:
    """读取恰好 size 个字节，不足时抛出 TransportError"""
    if size == 0:
        return b""
    try:
        data = port.read(size)
    except (serial.SerialException, OSError) as e:
        raise TransportError(f"读取数据失败: {e}") from e

    if len(data) != size:
        raise TransportError(f"读取超时: 期望{size}字节, 实际{len(data)}字节")
    return bytes(data)

