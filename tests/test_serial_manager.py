#!/usr/bin/env python3
"""
串口管理器测试
==============

测试 psoc_flasher.core.serial_manager 模块。

串口测试涉及硬件设备，使用mock对象模拟 serial.Serial。
"""

import pytest
from unittest.mock import MagicMock, patch
import serial

from psoc_flasher.core.serial_manager import SerialManager
from psoc_flasher.config.settings import SerialConfig


class TestSerialManager:
    """SerialManager 基本功能测试"""

    def test_init(self):
        config = SerialConfig(port="COM1", baudrate=9600)
        manager = SerialManager(config)

        assert manager.config == config
        assert manager.port is None
        assert manager.is_open is False
        assert manager.last_error is None

    @patch('serial.Serial')
    def test_open_success(self, mock_serial_class):
        mock_serial_instance = MagicMock()
        mock_serial_instance.is_open = True
        mock_serial_class.return_value = mock_serial_instance

        config = SerialConfig(port="COM1", baudrate=9600)
        manager = SerialManager(config)

        assert manager.open() is True
        assert manager.is_open is True
        assert manager.port == mock_serial_instance
        mock_serial_class.assert_called_once_with(**config.to_serial_kwargs())

    @patch('serial.Serial')
    def test_open_failure(self, mock_serial_class):
        """打开失败时返回False并记录原因"""
        error = serial.SerialException("could not open port")
        mock_serial_class.side_effect = error

        manager = SerialManager(SerialConfig(port="COM99"))

        assert manager.open() is False
        assert manager.port is None
        assert manager.last_error is error

    @patch('serial.Serial')
    def test_open_twice(self, mock_serial_class):
        mock_serial_class.return_value = MagicMock(is_open=True)
        manager = SerialManager(SerialConfig(port="COM1"))

        assert manager.open() is True
        assert manager.open() is True
        mock_serial_class.assert_called_once()

    @patch('serial.Serial')
    def test_close(self, mock_serial_class):
        mock_serial_instance = MagicMock(is_open=True)
        mock_serial_class.return_value = mock_serial_instance

        manager = SerialManager(SerialConfig(port="COM1"))
        manager.open()
        manager.close()

        mock_serial_instance.close.assert_called_once()
        assert manager.port is None

    @patch('serial.Serial')
    def test_close_error_is_logged(self, mock_serial_class):
        mock_serial_instance = MagicMock(is_open=True)
        mock_serial_instance.close.side_effect = serial.SerialException("busy")
        mock_serial_class.return_value = mock_serial_instance

        manager = SerialManager(SerialConfig(port="COM1"))
        manager.open()
        manager.close()

        assert manager.port is None

    @patch('serial.Serial')
    def test_context_manager(self, mock_serial_class):
        mock_serial_instance = MagicMock(is_open=True)
        mock_serial_class.return_value = mock_serial_instance

        with SerialManager(SerialConfig(port="COM1")) as manager:
            assert manager.is_open

        mock_serial_instance.close.assert_called_once()

    @patch('serial.Serial', side_effect=serial.SerialException("denied"))
    def test_context_manager_open_failure(self, mock_serial_class):
        with pytest.raises(RuntimeError, match="无法打开串口"):
            with SerialManager(SerialConfig(port="COM1")):
                pass


class TestListPorts:
    """串口枚举测试"""

    @patch('psoc_flasher.core.serial_manager.list_ports.comports')
    def test_list_available_ports(self, mock_comports):
        port_info = MagicMock(device="/dev/ttyACM0", description="KitProg", hwid="USB VID:PID=04B4:F139")
        mock_comports.return_value = [port_info]

        ports = SerialManager.list_available_ports()

        assert ports == [{
            'device': "/dev/ttyACM0",
            'description': "KitProg",
            'hwid': "USB VID:PID=04B4:F139",
        }]

    @patch('psoc_flasher.core.serial_manager.list_ports.comports', return_value=[])
    def test_print_no_ports(self, mock_comports, capsys):
        SerialManager.print_available_ports()
        assert "没有找到可用的串口" in capsys.readouterr().out
