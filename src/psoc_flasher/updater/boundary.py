"""
外部调用接口
============

供外部调用方（脚本、其他语言的绑定层等）使用的简化接口。

所有函数都不会抛出库内异常：失败时返回 None 或错误状态码，并把错误
记录到调用方传入的 ErrorSlot 中。ErrorSlot 由调用方持有，不使用任何
全局或线程局部状态。
"""

from dataclasses import replace
from enum import IntEnum
from pathlib import Path
from typing import Optional, Union

from ..config.settings import SerialConfig, UpdateConfig
from ..core.exceptions import BootloaderError
from ..core.serial_manager import SerialManager
from ..utils.logger import get_logger
from .session import UpdateSession

logger = get_logger(__name__)


class UpdateStatus(IntEnum):
    """接口返回的状态码"""

    OK = 0
    INIT_ERROR = 1  # 会话建立失败
    UPLOAD_ERROR = 2  # 烧写失败


class ErrorSlot:
    """保存最近一次失败信息，读取后清空"""

    def __init__(self):
        self._error: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        """最近一次的异常对象（不清空）"""
        return self._error

    def record(self, error: BaseException) -> None:
        """记录一次失败，覆盖之前的记录"""
        self._error = error

    def length(self) -> int:
        """
        最近错误信息的长度

        包含结尾的一个终止符，便于调用方预先分配缓冲区；没有错误时为0。
        """
        if self._error is None:
            return 0
        return len(str(self._error).encode("utf-8")) + 1

    def take_message(self) -> Optional[str]:
        """取出最近的错误信息并清空，没有错误时返回 None"""
        if self._error is None:
            return None
        message = str(self._error)
        self._error = None
        return message

    def __bool__(self) -> bool:
        return self._error is not None


class PortSession(UpdateSession):
    """同时持有串口管理器的会话，关闭会话时一并关闭串口"""

    def __init__(self, serial_manager: SerialManager, config: Optional[UpdateConfig] = None):
        self.serial_manager = serial_manager
        super().__init__(serial_manager.port, config)

    def close(self) -> None:
        try:
            super().close()
        finally:
            self.serial_manager.close()


def open_session(
    port_name: str,
    errors: ErrorSlot,
    serial_config: Optional[SerialConfig] = None,
    update_config: Optional[UpdateConfig] = None,
) -> Optional[UpdateSession]:
    """
    打开串口并建立更新会话

    Args:
        port_name: 串口号（如 COM1, /dev/ttyUSB0）
        errors: 失败时记录错误的 ErrorSlot
        serial_config: 串口配置，其中的 port 会被 port_name 覆盖
        update_config: 更新配置

    Returns:
        成功返回会话，失败返回 None（串口已关闭，不会留下半初始化的会话）
    """
    try:
        if serial_config is None:
            serial_config = SerialConfig(port=port_name)
        else:
            serial_config = replace(serial_config, port=port_name)
    except ValueError as e:
        errors.record(e)
        return None

    serial_manager = SerialManager(serial_config)
    if not serial_manager.open():
        errors.record(serial_manager.last_error or BootloaderError(f"无法打开串口 {port_name}"))
        return None

    try:
        return PortSession(serial_manager, update_config)
    except BootloaderError as e:
        # PortSession 握手失败时已经关闭了串口
        logger.error(f"建立会话失败: {e}")
        errors.record(e)
        return None


def run_update(
    session: UpdateSession, image_path: Union[str, Path], errors: ErrorSlot
) -> UpdateStatus:
    """
    使用已建立的会话烧写镜像文件

    Args:
        session: open_session 返回的会话
        image_path: .cyacd 文件路径
        errors: 失败时记录错误的 ErrorSlot

    Returns:
        UpdateStatus.OK 或 UpdateStatus.UPLOAD_ERROR
    """
    try:
        session.update_from_file(image_path)
    except (BootloaderError, OSError) as e:
        logger.error(f"烧写失败: {e}")
        errors.record(e)
        return UpdateStatus.UPLOAD_ERROR
    return UpdateStatus.OK


def update_device(
    port_name: str,
    image_path: Union[str, Path],
    errors: ErrorSlot,
    serial_config: Optional[SerialConfig] = None,
    update_config: Optional[UpdateConfig] = None,
) -> UpdateStatus:
    """
    打开串口、烧写镜像并关闭会话

    Args:
        port_name: 串口号
        image_path: .cyacd 文件路径
        errors: 失败时记录错误的 ErrorSlot
        serial_config: 串口配置
        update_config: 更新配置

    Returns:
        0 成功，1 会话建立失败，2 烧写失败
    """
    session = open_session(port_name, errors, serial_config, update_config)
    if session is None:
        return UpdateStatus.INIT_ERROR

    with session:
        return run_update(session, image_path, errors)
