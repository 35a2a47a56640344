"""
串口管理模块
============

提供串口的打开、关闭和枚举功能。
"""

import serial
from serial.tools import list_ports
from typing import List, Optional, Dict

from ..config.settings import SerialConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SerialManager:
    """串口管理器"""

    def __init__(self, config: SerialConfig):
        """
        初始化串口管理器

        Args:
            config: 串口配置对象
        """
        self.config = config
        self._port: Optional[serial.Serial] = None
        self.last_error: Optional[Exception] = None

    @property
    def port(self) -> Optional[serial.Serial]:
        """获取串口对象"""
        return self._port

    @property
    def is_open(self) -> bool:
        """检查串口是否已打开"""
        return self._port is not None and self._port.is_open

    def open(self) -> bool:
        """
        打开串口连接

        Returns:
            成功返回True，失败返回False，失败原因保存在 last_error
        """
        if self.is_open:
            logger.warning(f"串口 {self.config.port} 已经打开")
            return True

        try:
            self._port = serial.Serial(**self.config.to_serial_kwargs())
        except (serial.SerialException, ValueError) as e:
            logger.error(f"打开串口失败: {e}")
            self.last_error = e
            self._port = None
            return False

        self.last_error = None
        logger.info(f"成功打开串口 {self.config.port} @ {self.config.baudrate}")
        return True

    def close(self) -> None:
        """关闭串口连接"""
        try:
            if self._port and self._port.is_open:
                self._port.close()
                logger.info(f"已关闭串口 {self.config.port}")
        except (serial.SerialException, OSError) as e:
            logger.error(f"关闭串口失败: {e}")
        finally:
            self._port = None

    @staticmethod
    def list_available_ports() -> List[Dict[str, str]]:
        """
        获取系统可用的串口列表

        Returns:
            串口信息列表，每个元素包含device、description、hwid字段
        """
        ports = []
        for port_info in list_ports.comports():
            ports.append({
                'device': port_info.device,
                'description': port_info.description or '未知设备',
                'hwid': port_info.hwid or '未知硬件ID'
            })
        return ports

    @staticmethod
    def print_available_ports() -> None:
        """打印系统可用的串口信息"""
        ports = SerialManager.list_available_ports()

        if not ports:
            print("没有找到可用的串口。")
            return

        print("可用的串口：")
        for port in ports:
            print(f"  {port['device']} - {port['description']}")

    def __enter__(self):
        """支持with语句"""
        if not self.open():
            raise RuntimeError(f"无法打开串口 {self.config.port}: {self.last_error}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.close()
