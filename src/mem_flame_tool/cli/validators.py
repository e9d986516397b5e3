# -*- coding: utf-8 -*-
"""
CLI验证器模块
"""

from pathlib import Path
from typing import List, Optional

from ..analyzer.presenter import SUPPORTED_FORMATS
from ..exceptions import InvalidArgumentError


def parse_include_patterns(pattern_str: Optional[str]) -> List[str]:
    """
    解析包含过滤模式字符串

    Args:
        pattern_str: 逗号分隔的模式字符串，如 "com.foo,org.bar"

    Returns:
        List[str]: 解析后的模式列表（保持原样，归一化由 IncludeFilter 完成）
    """
    if not pattern_str or not pattern_str.strip():
        return []

    patterns = [pattern.strip() for pattern in pattern_str.split(',')]
    # 过滤掉空字符串
    return [pattern for pattern in patterns if pattern]


def parse_output_formats(format_spec: str) -> List[str]:
    """
    解析输出格式

    Args:
        format_spec: 逗号分隔的格式列表，如 "txt,xlsx"

    Returns:
        List[str]: 去重后的格式列表，保持输入顺序

    Raises:
        InvalidArgumentError: 格式为空或不受支持
    """
    if not format_spec or not format_spec.strip():
        raise InvalidArgumentError("输出格式不能为空")

    formats = []
    for output_format in format_spec.split(','):
        output_format = output_format.strip().lower()
        if not output_format:
            continue
        if output_format not in SUPPORTED_FORMATS:
            raise InvalidArgumentError(
                f"不支持的输出格式: {output_format}。支持的格式: {', '.join(SUPPORTED_FORMATS)}")
        if output_format not in formats:
            formats.append(output_format)

    if not formats:
        raise InvalidArgumentError("输出格式不能为空")
    return formats


def validate_positive(value, name: str):
    """验证数值参数为正数，None 表示使用默认值"""
    if value is not None and value <= 0:
        raise InvalidArgumentError(f"{name} 必须为正数: {value}")
    return value


def validate_file(file_path: str) -> bool:
    """验证文件是否存在且为 JSON 格式"""
    path = Path(file_path)
    if not path.exists():
        print(f"错误: 文件不存在: {file_path}")
        return False

    if not path.is_file():
        print(f"错误: 不是文件: {file_path}")
        return False

    suffixes = [suffix.lower() for suffix in path.suffixes]
    if '.json' not in suffixes:
        print(f"警告: 文件可能不是 JSON 格式: {file_path}")

    return True
