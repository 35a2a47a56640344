#!/usr/bin/env python3
"""
PSoC 串口固件烧写工具 - 命令行入口
==================================

支持通过 python -m psoc_flasher 或 psoc-flasher 调用
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config.settings import SerialConfig, UpdateConfig
from .core.exceptions import BootloaderError
from .core.serial_manager import SerialManager
from .firmware.cyacd import load_image
from .updater.boundary import ErrorSlot, UpdateStatus, update_device
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)

PROGRAM_NAME = "PSoC串口固件烧写工具"


def create_parser() -> argparse.ArgumentParser:
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="psoc-flasher",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 烧写固件
  python -m psoc_flasher update --port /dev/ttyUSB0 --path firmware.cyacd

  # 输出调试日志并写入文件
  python -m psoc_flasher -v --log-file flash.log update --port /dev/ttyUSB0 --path firmware.cyacd

  # 查看镜像信息
  python -m psoc_flasher info --path firmware.cyacd

  # 列出串口
  python -m psoc_flasher ports
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--log-file", help="同时把日志写入指定文件")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    update_parser = subparsers.add_parser("update", help="烧写固件镜像")
    update_parser.add_argument("-s", "--port", required=True, help="串口号（如 COM1, /dev/ttyUSB0）")
    update_parser.add_argument("-p", "--path", required=True, help=".cyacd 镜像文件路径")
    update_parser.add_argument("--baudrate", type=int, default=115200, help="波特率（默认115200）")
    update_parser.add_argument("--retries", type=int, default=5, help="每条命令的最大尝试次数（默认5）")
    update_parser.add_argument("--no-verify", action="store_true", help="不校验镜像行校验和")
    update_parser.add_argument("--progress", action="store_true", help="显示烧写进度")

    subparsers.add_parser("ports", help="列出可用串口")

    info_parser = subparsers.add_parser("info", help="查看镜像信息")
    info_parser.add_argument("-p", "--path", required=True, help=".cyacd 镜像文件路径")

    return parser


def run_update_command(args: argparse.Namespace) -> int:
    """执行 update 子命令"""
    serial_config = SerialConfig(port=args.port, baudrate=args.baudrate)
    update_config = UpdateConfig(
        max_attempts=args.retries,
        verify_row_checksums=not args.no_verify,
        show_progress=args.progress,
    )

    errors = ErrorSlot()
    logger.info("开始更新...")
    status = update_device(args.port, args.path, errors, serial_config, update_config)
    if status is not UpdateStatus.OK:
        logger.error(f"...更新失败: {errors.take_message()}")
        return 1

    logger.info("...更新成功完成!")
    return 0


def show_image_info(path: str) -> int:
    """执行 info 子命令"""
    image = load_image(path)
    print(f"硅片ID:   0x{image.silicon_id:08x}")
    print(f"硅片版本: 0x{image.silicon_rev:02x}")
    print(f"校验类型: {image.checksum_kind}")
    print(f"行数:     {len(image.rows)}")
    print(f"数据:     {image.total_bytes} 字节")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """主函数，返回进程退出码"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logger(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "update":
            return run_update_command(args)
        if args.command == "ports":
            SerialManager.print_available_ports()
            return 0
        if args.command == "info":
            return show_image_info(args.path)
    except KeyboardInterrupt:
        print("\n用户中断程序，退出")
        return 1
    except (BootloaderError, OSError, ValueError) as e:
        logger.error(f"程序异常: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
