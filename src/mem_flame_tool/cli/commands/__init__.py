"""
CLI命令模块
"""

from .flame import FlameCommand

__all__ = ['FlameCommand']
