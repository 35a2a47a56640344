"""
固件更新会话模块
================

负责进入 Bootloader、逐行烧写和退出 Bootloader 的完整流程。

会话状态：UNINITIALIZED -> ACTIVE -> CLOSED，关闭后不能再次激活。
ExitBootloader 在会话释放时发送且只发送一次，请通过 with 语句或
try/finally 调用 close() 使用会话。
"""

import logging
import struct
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from ..config.constants import (
    CommandCode,
    ROW_ADDRESS_FORMAT,
    SILICON_ID_FORMAT,
    SILICON_ID_SIZE,
)
from ..config.settings import UpdateConfig
from ..core.exceptions import (
    BootloaderError,
    ProtocolFailure,
    SessionCloseWarning,
    SessionStateError,
    SiliconMismatch,
)
from ..core.frame_handler import Command, FrameHandler
from ..firmware.cyacd import FirmwareImage, FlashRow, load_image
from ..utils.logger import get_logger
from ..utils.progress import ProgressBar
from ..utils.retry import retry_call

logger = get_logger(__name__)


class SessionState(Enum):
    """更新会话状态"""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


def iter_commands(row: FlashRow, max_chunk_size: int) -> Iterator[Command]:
    """
    生成烧写一行所需的命令序列

    行数据按 max_chunk_size 分块，除最后一块外均以 SEND_DATA 发送；
    最后一块加上行地址前缀以 PROGRAM_ROW 发送。即使最后一块为空
    （数据长度恰好是块大小的整数倍），也会发送 PROGRAM_ROW。

    Args:
        row: 要烧写的行
        max_chunk_size: 单帧携带的最大数据长度

    Yields:
        依次发送的命令
    """
    chunk_count = len(row.data) // max_chunk_size
    for i in range(chunk_count + 1):
        chunk = row.data[i * max_chunk_size:(i + 1) * max_chunk_size]
        if i == chunk_count:
            address = struct.pack(ROW_ADDRESS_FORMAT, row.array_id, row.row_number)
            yield Command(CommandCode.PROGRAM_ROW, address + chunk)
        else:
            yield Command(CommandCode.SEND_DATA, chunk)


class UpdateSession:
    """Bootloader 更新会话"""

    def __init__(self, port, config: Optional[UpdateConfig] = None):
        """
        与设备握手并建立会话

        Args:
            port: 已打开的串口对象，会话期间独占使用
            config: 更新配置（可选）

        Raises:
            RetryExhausted: 握手应答多次读取失败
            ProtocolFailure: 握手应答不是 SUCCESS 或负载长度不足
            TransportError: 发送握手命令失败
        """
        self.port = port
        self.config = config or UpdateConfig()
        self.state = SessionState.UNINITIALIZED
        self.close_warning: Optional[SessionCloseWarning] = None
        self._exit_sent = False

        try:
            self._silicon_id = self._enter_bootloader()
        except BaseException:
            # 握手失败也要让设备退出 Bootloader
            self.close()
            raise

        self.state = SessionState.ACTIVE

    @property
    def silicon_id(self) -> int:
        """设备的硅片ID，握手后不可修改"""
        return self._silicon_id

    def _enter_bootloader(self) -> int:
        FrameHandler.send_command(self.port, Command(CommandCode.ENTER_BOOTLOADER))
        reply = FrameHandler.read_frame_with_retry(
            self.port, self.config.handshake_attempts
        )

        if reply.code is not CommandCode.SUCCESS:
            raise ProtocolFailure(f"进入Bootloader失败: {reply.code}", reply.code)
        if len(reply.payload) < SILICON_ID_SIZE:
            raise ProtocolFailure(
                f"握手应答长度不足: {len(reply.payload)}字节", reply.code
            )

        (silicon_id,) = struct.unpack_from(SILICON_ID_FORMAT, reply.payload)
        extra = reply.payload[SILICON_ID_SIZE:]
        logger.info(f"已进入Bootloader, 硅片ID=0x{silicon_id:08x}")
        if extra:
            logger.debug(f"握手附加信息: {extra.hex()}")
        return silicon_id

    def update(self, image: FirmwareImage) -> None:
        """
        将镜像逐行烧写到设备

        任意一条命令重试耗尽后立即中止，已烧写的行保持原样，不会回滚。

        Args:
            image: 解析后的固件镜像

        Raises:
            SessionStateError: 会话不在 ACTIVE 状态
            SiliconMismatch: 镜像的硅片ID与设备不一致
            RetryExhausted: 某条命令多次尝试后仍失败
        """
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError(f"会话状态为 {self.state.value}，无法更新")

        if image.silicon_id != self._silicon_id:
            raise SiliconMismatch(self._silicon_id, image.silicon_id)

        total = len(image.rows)
        logger.info(f"开始烧写: 共{total}行, {image.total_bytes}字节")
        progress = ProgressBar(total=total) if self.config.show_progress else None
        # 显示进度条时重试信息记为调试级别
        retry_log_level = logging.DEBUG if progress else logging.WARNING

        for index, row in enumerate(image.rows):
            logger.debug(
                f"烧写第{row.row_number}行: 阵列={row.array_id}, 数据={len(row.data)}字节"
            )
            for command in iter_commands(row, self.config.max_chunk_size):
                retry_call(
                    lambda attempt, cmd=command: self._transact(cmd, attempt),
                    max_attempts=self.config.max_attempts,
                    delay=self.config.retry_delay,
                    logger=logger,
                    log_level=retry_log_level,
                )
            if progress:
                progress.update(index + 1)

        if progress:
            progress.finish()
        logger.info("烧写完成")

    def update_from_file(self, path: Union[str, Path]) -> None:
        """
        读取镜像文件并烧写

        Args:
            path: .cyacd 文件路径
        """
        image = load_image(path, self.config.verify_row_checksums)
        self.update(image)

    def _transact(self, command: Command, attempt: int) -> Command:
        """发送一条命令并读取一个应答，应答不是 SUCCESS 时抛出 ProtocolFailure"""
        if attempt > 0:
            # 上一次尝试可能只读了半个应答，或应答在超时后才到达
            FrameHandler.discard_input(self.port)
        FrameHandler.send_command(self.port, command)
        reply = FrameHandler.read_frame(self.port)
        if reply.code is not CommandCode.SUCCESS:
            raise ProtocolFailure(
                f"第{attempt + 1}次写入 {command.code.name} 失败: 设备应答 {reply.code}",
                reply.code,
            )
        return reply

    def close(self) -> None:
        """
        发送 ExitBootloader 并结束会话

        每个会话只发送一次，重复调用无效果。发送失败只记录日志，
        不会抛出异常，以免覆盖调用方原本的错误。
        """
        if self._exit_sent:
            return
        self._exit_sent = True
        self.state = SessionState.CLOSED

        try:
            FrameHandler.send_command(self.port, Command(CommandCode.EXIT_BOOTLOADER))
        except BootloaderError as e:
            self.close_warning = SessionCloseWarning(f"关闭Bootloader会话失败: {e}")
            logger.warning(str(self.close_warning))
            return

        logger.info("已退出Bootloader")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
