#!/usr/bin/env python3
"""
日志模块测试
============

测试包日志器的层级、文件输出和级别设置。
"""

import io
import logging

import pytest

from psoc_flasher.utils.logger import (
    PACKAGE_LOGGER_NAME,
    ColoredFormatter,
    get_logger,
    set_level,
    setup_logger,
)


@pytest.fixture(autouse=True)
def restore_package_logger():
    yield
    setup_logger()


class TestGetLogger:
    """get_logger 测试"""

    def test_module_logger_is_child_of_package(self):
        logger = get_logger("psoc_flasher.core.frame_handler")
        assert logger.parent is logging.getLogger(PACKAGE_LOGGER_NAME)
        assert logger.propagate is True

    def test_outside_name_is_attached_to_package(self):
        assert get_logger("__main__").name == "psoc_flasher.__main__"

    def test_package_logger(self):
        logger = get_logger()
        assert logger.name == PACKAGE_LOGGER_NAME
        assert logger.propagate is False
        assert logger.handlers


class TestSetupLogger:
    """setup_logger 测试"""

    def test_console_stream(self):
        stream = io.StringIO()
        setup_logger(stream=stream)

        get_logger("psoc_flasher.updater.session").info("已进入Bootloader")

        output = stream.getvalue()
        assert "已进入Bootloader" in output
        assert "test_logger.py.test_console_stream()" in output

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "flash.log"
        setup_logger(level=logging.DEBUG, log_file=str(log_file), console_output=False)

        get_logger("psoc_flasher.core.frame_handler").debug("已发送 Command(SEND_DATA)")
        setup_logger()

        content = log_file.read_text(encoding="utf-8")
        assert "psoc_flasher.core.frame_handler - DEBUG - 已发送 Command(SEND_DATA)" in content

    def test_handlers_replaced(self):
        setup_logger(stream=io.StringIO())
        logger = setup_logger(stream=io.StringIO())
        assert len(logger.handlers) == 1

    def test_no_output(self):
        logger = setup_logger(console_output=False)
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]


def test_set_level_applies_to_children():
    stream = io.StringIO()
    setup_logger(stream=stream)
    child = get_logger("psoc_flasher.firmware.cyacd")

    child.debug("hidden")
    set_level(logging.DEBUG)
    child.debug("visible")

    assert "hidden" not in stream.getvalue()
    assert "visible" in stream.getvalue()


def test_colored_formatter_level_color():
    record = logging.LogRecord(
        "psoc_flasher", logging.WARNING, "/src/session.py", 42, "重试", None, None, "update"
    )
    text = ColoredFormatter().format(record)

    assert text.startswith(ColoredFormatter.COLORS["WARNING"])
    assert "重试 [session.py.update():42]" in text
