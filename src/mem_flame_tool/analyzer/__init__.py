"""
分析器模块
"""

from .translator import translate
from .stack_key import STACK_TAG, build_key
from .filters import IncludeFilter
from .table import ConcurrentAggregator
from .pool import CallerRunsExecutor, CancellationToken
from .task import AllocationTask
from .presenter import render, write_report
from .main import FlameResult, generate_flame_report, process_events

__all__ = [
    'translate',
    'STACK_TAG',
    'build_key',
    'IncludeFilter',
    'ConcurrentAggregator',
    'CallerRunsExecutor',
    'CancellationToken',
    'AllocationTask',
    'render',
    'write_report',
    'FlameResult',
    'generate_flame_report',
    'process_events',
]
