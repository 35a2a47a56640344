"""
校验算法模块
============

提供数据帧和镜像数据行使用的校验算法。
"""

_BYTES_TYPES = (bytes, bytearray, memoryview)


def calculate_checksum(data: bytes) -> int:
    """
    计算数据帧的校验和

    将所有字节累加后取低16位，再取二进制补码，使得
    (累加和 + 校验和) 对 65536 取模为 0。

    Args:
        data: 需要计算校验和的字节数据（起始字节、命令字、长度和负载）

    Returns:
        校验和值，16位无符号整数

    Raises:
        TypeError: 当输入不是字节类型时抛出

    Examples:
        >>> calculate_checksum(b'')
        0
        >>> hex(calculate_checksum(b'\\x01\\x38\\x00\\x00'))
        '0xffc7'
    """
    if not isinstance(data, _BYTES_TYPES):
        raise TypeError("输入数据必须是bytes类型")

    total = sum(bytes(data)) & 0xFFFF
    return (-total) & 0xFFFF


def calculate_row_checksum(data: bytes) -> int:
    """
    计算镜像数据行的8位校验和

    数据行全部字节与校验和相加后对256取模为0。

    Args:
        data: 阵列号、行号、长度和行数据组成的字节串

    Returns:
        8位校验和
    """
    if not isinstance(data, _BYTES_TYPES):
        raise TypeError("输入数据必须是bytes类型")

    return (-sum(bytes(data))) & 0xFF
