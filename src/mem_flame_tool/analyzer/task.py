"""
单个分配事件的处理任务
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models import AllocationEvent, RunStats
from .filters import IncludeFilter
from .pool import CancellationToken
from .stack_key import build_key
from .table import ConcurrentAggregator

logger = logging.getLogger(__name__)


@dataclass
class AllocationTask:
    """
    任务上下文：独占一个事件，只读借用过滤器，通过 add 写入聚合表
    """
    event: AllocationEvent
    include_filter: IncludeFilter
    table: ConcurrentAggregator
    stats: Optional[RunStats] = None
    token: Optional[CancellationToken] = None

    def _count(self, name: str, amount: int = 1) -> None:
        if self.stats is not None:
            self.stats.increment(name, amount)

    def run(self) -> bool:
        """
        处理事件

        Returns:
            bool: 事件是否被计入聚合表
        """
        if self.token is not None and self.token.cancelled:
            return False

        event = self.event
        if not event.is_allocation or not event.is_complete:
            self._count('events_skipped')
            return False

        try:
            key = build_key(event.stack_trace, event.object_class)
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug(f"跳过无法解析的事件: {e}")
            self._count('events_skipped')
            return False

        if not self.include_filter.accepts(key):
            self._count('events_filtered')
            return False

        try:
            self.table.add(key, event.allocation_size)
        except ValueError as e:
            logger.debug(f"跳过分配大小非法的事件: {e}")
            self._count('events_skipped')
            return False

        self._count('events_accepted')
        self._count('bytes_accepted', event.allocation_size)
        return True
