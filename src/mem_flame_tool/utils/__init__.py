"""
通用工具模块
"""

from .file_utils import derive_process_id, output_base_name

__all__ = ['derive_process_id', 'output_base_name']
