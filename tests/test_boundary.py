"""
外部调用接口测试
================

测试 open_session / run_update / update_device 和 ErrorSlot。
串口通过 patch serial.Serial 替换为模拟 Bootloader 设备。
"""

from unittest.mock import patch

import pytest
import serial

from psoc_flasher.config.constants import CommandCode
from psoc_flasher.config.settings import SerialConfig, UpdateConfig
from psoc_flasher.core.exceptions import RetryExhausted, SiliconMismatch
from psoc_flasher.updater.boundary import (
    ErrorSlot,
    UpdateStatus,
    open_session,
    run_update,
    update_device,
)

from tests.fake_device import FakeBootloaderPort

SILICON_ID = 0x1E9602A9
IMAGE = "1E9602A90100\n:000001000548656C6C6F06\n"

FAST = UpdateConfig(retry_delay=0, handshake_attempts=2)


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "app.cyacd"
    path.write_text(IMAGE)
    return path


@pytest.fixture
def fake_port():
    port = FakeBootloaderPort(silicon_id=SILICON_ID)
    with patch("serial.Serial", return_value=port):
        yield port


class TestErrorSlot:
    """ErrorSlot 测试"""

    def test_empty(self):
        errors = ErrorSlot()
        assert errors.length() == 0
        assert errors.take_message() is None
        assert not errors

    def test_length_includes_terminator(self):
        errors = ErrorSlot()
        errors.record(ValueError("bad"))
        assert errors.length() == 4
        assert errors

    def test_length_counts_utf8_bytes(self):
        errors = ErrorSlot()
        errors.record(ValueError("错误"))
        assert errors.length() == len("错误".encode("utf-8")) + 1

    def test_take_clears(self):
        errors = ErrorSlot()
        errors.record(ValueError("first"))
        errors.record(ValueError("second"))

        assert errors.take_message() == "second"
        assert errors.take_message() is None
        assert errors.length() == 0


class TestUpdateDevice:
    """update_device 测试"""

    def test_success(self, fake_port, image_path):
        errors = ErrorSlot()
        status = update_device("/dev/ttyUSB0", image_path, errors, update_config=FAST)

        assert status is UpdateStatus.OK
        assert not errors
        assert fake_port.codes() == [
            CommandCode.ENTER_BOOTLOADER,
            CommandCode.PROGRAM_ROW,
            CommandCode.EXIT_BOOTLOADER,
        ]
        assert fake_port.is_open is False

    def test_port_open_failure(self, image_path):
        errors = ErrorSlot()
        with patch("serial.Serial", side_effect=serial.SerialException("no such port")):
            status = update_device("/dev/missing", image_path, errors)

        assert status is UpdateStatus.INIT_ERROR
        assert "no such port" in errors.take_message()

    def test_handshake_failure(self, image_path):
        """握手失败返回 INIT_ERROR，串口被关闭"""
        port = FakeBootloaderPort(
            replies={CommandCode.ENTER_BOOTLOADER: lambda command: b""}
        )
        errors = ErrorSlot()
        with patch("serial.Serial", return_value=port):
            status = update_device("/dev/ttyUSB0", image_path, errors, update_config=FAST)

        assert status is UpdateStatus.INIT_ERROR
        assert isinstance(errors.error, RetryExhausted)
        assert port.count(CommandCode.EXIT_BOOTLOADER) == 1
        assert port.is_open is False

    def test_silicon_mismatch(self, image_path):
        port = FakeBootloaderPort(silicon_id=0x12345678)
        errors = ErrorSlot()
        with patch("serial.Serial", return_value=port):
            status = update_device("/dev/ttyUSB0", image_path, errors, update_config=FAST)

        assert status is UpdateStatus.UPLOAD_ERROR
        assert isinstance(errors.error, SiliconMismatch)
        assert port.count(CommandCode.EXIT_BOOTLOADER) == 1

    def test_missing_image(self, fake_port, tmp_path):
        errors = ErrorSlot()
        status = update_device(
            "/dev/ttyUSB0", tmp_path / "missing.cyacd", errors, update_config=FAST
        )

        assert status is UpdateStatus.UPLOAD_ERROR
        assert isinstance(errors.error, FileNotFoundError)
        assert fake_port.count(CommandCode.EXIT_BOOTLOADER) == 1

    def test_serial_config_port_overridden(self, fake_port, image_path):
        config = SerialConfig(port="COM9", baudrate=57600)
        errors = ErrorSlot()
        with patch("serial.Serial", return_value=fake_port) as mock_serial_class:
            update_device("COM3", image_path, errors, config, FAST)

        kwargs = mock_serial_class.call_args.kwargs
        assert kwargs["port"] == "COM3"
        assert kwargs["baudrate"] == 57600
        assert config.port == "COM9"


class TestOpenSession:
    """open_session / run_update 测试"""

    def test_open_and_run(self, fake_port, image_path):
        errors = ErrorSlot()
        session = open_session("/dev/ttyUSB0", errors, update_config=FAST)
        assert session is not None
        assert session.silicon_id == SILICON_ID

        with session:
            assert run_update(session, image_path, errors) is UpdateStatus.OK

        assert fake_port.count(CommandCode.EXIT_BOOTLOADER) == 1
        assert fake_port.is_open is False

    def test_empty_port_name(self):
        errors = ErrorSlot()
        assert open_session("", errors) is None
        assert errors.length() > 0
