"""
折叠调用栈键构建
"""

from typing import Sequence

from ..models import Frame
from .translator import translate

# 折叠栈的固定前缀，标识调用栈来源的运行时格式
STACK_TAG = 'java;'
PATH_SEPARATOR = '/'


def normalize_type_name(type_name: str) -> str:
    """将限定名中的 . 替换为路径分隔符"""
    return type_name.replace('.', PATH_SEPARATOR)


def build_key(stack: Sequence[Frame], allocated_type: str) -> str:
    """
    构建折叠调用栈字符串

    stack 按采集顺序排列（分配点在前），输出从最外层调用者走到分配点，
    最后附上分配对象的类型名:

        java;A:.a;B:.b;C:.c;int

    Args:
        stack: 调用栈帧
        allocated_type: 分配对象的类型描述符

    Returns:
        str: 折叠调用栈字符串
    """
    if not stack:
        raise ValueError("调用栈不能为空")

    parts = [STACK_TAG]
    for frame in reversed(stack):
        parts.append(f"{normalize_type_name(frame.type_name)}:.{frame.method_name};")
    parts.append(translate(allocated_type))
    return ''.join(parts)
