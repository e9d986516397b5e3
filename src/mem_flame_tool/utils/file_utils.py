"""
文件名处理工具模块
"""

from pathlib import Path
from typing import Union

from ..exceptions import InvalidArgumentError


def derive_process_id(file_path: Union[str, Path]) -> int:
    """
    从输入文件名中提取进程号：取最后一个 '-' 与第一个 '.' 之间的数字
    例如: recording-1234.json -> 1234, recording.json -> 0

    Args:
        file_path: 输入文件路径

    Returns:
        int: 进程号，文件名中没有 '-' 或 '.' 时返回 0

    Raises:
        InvalidArgumentError: 两者之间的内容不是数字
    """
    name = Path(file_path).name
    dash = name.rfind('-')
    dot = name.find('.')
    if dash == -1 or dot == -1:
        return 0

    pid_text = name[dash + 1:dot]
    if not (pid_text.isascii() and pid_text.isdigit()):
        raise InvalidArgumentError(f"无法从文件名 {name} 中解析进程号: {pid_text!r}")
    return int(pid_text)


def output_base_name(file_path: Union[str, Path]) -> str:
    """输出文件的基础文件名，例如 mem-info-1234"""
    return f"mem-info-{derive_process_id(file_path)}"
