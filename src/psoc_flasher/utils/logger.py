"""
日志记录模块
============

所有模块的日志器都是 psoc_flasher 包日志器的子日志器，只有包日志器
挂载处理器：控制台输出彩色日志，可选再写入一个日志文件。
"""

import datetime
import logging
import sys
from typing import Optional, TextIO


PACKAGE_LOGGER_NAME = "psoc_flasher"

FILE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s "
    "[%(filename)s.%(funcName)s():%(lineno)d]"
)


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record):
        """格式化日志记录，附带毫秒时间戳和调用位置"""
        now = datetime.datetime.fromtimestamp(record.created)
        timestamp = now.strftime("%Y-%m-%d %H:%M:%S") + f".{now.microsecond // 1000:03d}"

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        return (
            f"{color}[{timestamp}] {record.getMessage()} "
            f"[{record.filename}.{record.funcName}():{record.lineno}]{reset}"
        )


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if not logger.handlers:
        setup_logger()
    return logger


def setup_logger(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console_output: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    配置包日志器，替换之前的所有处理器

    Args:
        level: 日志级别
        log_file: 日志文件路径，None表示不写入文件
        console_output: 是否输出到控制台
        stream: 控制台输出流，默认 stdout

    Returns:
        配置好的包日志器
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    # 不向 root 日志器传递
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    包外的名称（如以 python -m 运行时的 "__main__"）会挂到包日志器下。

    Args:
        name: 日志器名称，通常为 __name__

    Returns:
        日志器实例
    """
    package_logger = _package_logger()
    if name == PACKAGE_LOGGER_NAME:
        return package_logger
    if not name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_level(level: int) -> None:
    """
    修改包日志器的级别，对所有子日志器生效

    Args:
        level: 日志级别，如 logging.DEBUG
    """
    _package_logger().setLevel(level)
