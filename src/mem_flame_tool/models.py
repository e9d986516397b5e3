# -*- coding: utf-8 -*-
"""
内存分配事件数据模型定义
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# 两种被识别的分配事件类型
ALLOCATION_IN_NEW_TLAB = 'jdk.ObjectAllocationInNewTLAB'
ALLOCATION_OUTSIDE_TLAB = 'jdk.ObjectAllocationOutsideTLAB'
ALLOCATION_EVENT_TYPES = frozenset({ALLOCATION_IN_NEW_TLAB, ALLOCATION_OUTSIDE_TLAB})


@dataclass(frozen=True)
class Frame:
    """调用栈中的一帧"""
    type_name: str
    method_name: str


@dataclass(frozen=True)
class AllocationEvent:
    """内存分配事件数据模型

    stack_trace 按采集顺序保存，即最内层（分配点）在前。
    """
    event_type: str
    stack_trace: Optional[Tuple[Frame, ...]] = None
    object_class: Optional[str] = None
    allocation_size: Optional[int] = None

    @property
    def is_allocation(self) -> bool:
        """判断是否为分配事件"""
        return self.event_type in ALLOCATION_EVENT_TYPES

    @property
    def is_complete(self) -> bool:
        """判断必需字段是否齐全且调用栈非空"""
        return (
            bool(self.stack_trace)
            and self.object_class is not None
            and self.allocation_size is not None
        )


@dataclass
class RunStats:
    """单次运行的统计信息，worker 线程通过 increment 并发更新"""
    events_read: int = 0
    events_submitted: int = 0
    events_skipped: int = 0
    events_accepted: int = 0
    events_filtered: int = 0
    caller_runs: int = 0
    bytes_accepted: int = 0
    distinct_stacks: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def as_dict(self) -> Dict[str, int]:
        with self._lock:
            return {
                'events_read': self.events_read,
                'events_submitted': self.events_submitted,
                'events_skipped': self.events_skipped,
                'events_accepted': self.events_accepted,
                'events_filtered': self.events_filtered,
                'caller_runs': self.caller_runs,
                'bytes_accepted': self.bytes_accepted,
                'distinct_stacks': self.distinct_stacks,
            }
