"""
固件镜像解析模块
================

解析 .cyacd 格式的固件更新镜像。

文件格式（文本，每行一条记录，均为十六进制编码）：

- 第1行：硅片ID(4B, 大端) + 硅片版本(1B) + 校验类型(1B)
- 其余行：':' + 阵列号(1B) + 行号(2B, 大端) + 数据长度(2B, 大端)
  + 行数据(NB) + 行校验和(1B)
"""

import binascii
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union

from ..core.checksum import calculate_row_checksum
from ..core.exceptions import FormatError, RowChecksumError
from ..utils.logger import get_logger

logger = get_logger(__name__)

HEADER_FORMAT = ">IBB"  # 硅片ID + 硅片版本 + 校验类型
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
RECORD_PREFIX_FORMAT = ">BHH"  # 阵列号 + 行号 + 数据长度
RECORD_PREFIX_SIZE = struct.calcsize(RECORD_PREFIX_FORMAT)
RECORD_MARKER = ":"


@dataclass(frozen=True)
class FlashRow:
    """镜像中的一个可编程 Flash 行"""

    array_id: int
    row_number: int
    data: bytes
    checksum: int


@dataclass
class FirmwareImage:
    """解析后的固件镜像"""

    silicon_id: int
    silicon_rev: int
    checksum_kind: int
    rows: List[FlashRow] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        """所有行数据的总字节数"""
        return sum(len(row.data) for row in self.rows)


def _decode_hex(text: str, line_number: int) -> bytes:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"不是有效的十六进制字符串: {e}", line_number) from e


def parse_header(line: str, line_number: int = 1) -> tuple:
    """
    解析镜像头

    Returns:
        元组(硅片ID, 硅片版本, 校验类型)
    """
    header = _decode_hex(line, line_number)
    if len(header) < HEADER_SIZE:
        raise FormatError(
            f"镜像头长度不足: 期望{HEADER_SIZE}字节, 实际{len(header)}字节", line_number
        )
    return struct.unpack_from(HEADER_FORMAT, header)


def parse_row(line: str, line_number: int, verify_checksum: bool = True) -> FlashRow:
    """
    解析一条数据行记录

    Args:
        line: 去掉换行的记录文本，以 ':' 开头
        line_number: 行号(从1开始)，用于错误信息
        verify_checksum: 是否校验行校验和

    Returns:
        解析出的 FlashRow
    """
    if not line.startswith(RECORD_MARKER):
        raise FormatError(f"数据行缺少 '{RECORD_MARKER}' 前缀", line_number)

    record = _decode_hex(line[len(RECORD_MARKER):], line_number)
    if len(record) < RECORD_PREFIX_SIZE + 1:
        raise FormatError(f"数据行长度不足: {len(record)}字节", line_number)

    array_id, row_number, length = struct.unpack_from(RECORD_PREFIX_FORMAT, record)

    data_end = RECORD_PREFIX_SIZE + length
    if data_end + 1 > len(record):
        raise FormatError(
            f"声明的数据长度{length}超出记录剩余长度{len(record) - RECORD_PREFIX_SIZE - 1}",
            line_number,
        )
    if data_end + 1 < len(record):
        raise FormatError(f"数据行末尾有{len(record) - data_end - 1}个多余字节", line_number)

    data = record[RECORD_PREFIX_SIZE:data_end]
    checksum = record[data_end]

    if verify_checksum:
        expected = calculate_row_checksum(record[:data_end])
        if checksum != expected:
            raise RowChecksumError(
                f"行校验和错误: 记录=0x{checksum:02x}, 计算=0x{expected:02x}",
                line_number,
            )

    return FlashRow(
        array_id=array_id, row_number=row_number, data=data, checksum=checksum
    )


def parse_image(lines: Iterable[str], verify_row_checksums: bool = True) -> FirmwareImage:
    """
    解析固件镜像

    Args:
        lines: 镜像文件的文本行
        verify_row_checksums: 是否校验每行的校验和

    Returns:
        解析出的 FirmwareImage，行顺序与文件一致

    Raises:
        FormatError: 镜像格式错误

    Examples:
        >>> image = parse_image(["A1B2C3D401AA", ":010003000548656C6C6F03"])
        >>> hex(image.silicon_id), image.rows[0].data
        ('0xa1b2c3d4', b'Hello')
    """
    image = None
    for index, raw_line in enumerate(lines):
        line_number = index + 1
        line = raw_line.strip()

        if image is None:
            silicon_id, silicon_rev, checksum_kind = parse_header(line, line_number)
            image = FirmwareImage(silicon_id, silicon_rev, checksum_kind)
            continue

        if not line:
            continue

        image.rows.append(parse_row(line, line_number, verify_row_checksums))

    if image is None:
        raise FormatError("镜像缺少文件头")

    logger.debug(
        f"镜像解析完成: 硅片ID=0x{image.silicon_id:08x}, "
        f"行数={len(image.rows)}, 数据={image.total_bytes}字节"
    )
    return image


def load_image(path: Union[str, Path], verify_row_checksums: bool = True) -> FirmwareImage:
    """
    从文件读取并解析固件镜像

    Args:
        path: .cyacd 文件路径
        verify_row_checksums: 是否校验每行的校验和

    Returns:
        解析出的 FirmwareImage
    """
    path = Path(path)
    with path.open("r", encoding="ascii", errors="replace") as f:
        image = parse_image(f, verify_row_checksums)
    logger.info(f"已加载镜像: {path.name}, 共{len(image.rows)}行")
    return image
