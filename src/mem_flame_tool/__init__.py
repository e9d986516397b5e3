"""
Mem Flame Tool Package
"""

from .models import AllocationEvent, Frame
from .parser import RecordingFile
from .analyzer import IncludeFilter, build_key, translate, generate_flame_report

__all__ = [
    'AllocationEvent',
    'Frame',
    'RecordingFile',
    'IncludeFilter',
    'build_key',
    'translate',
    'generate_flame_report',
]
