"""
主分析流程：读取事件 -> 并发聚合 -> 排序输出
"""

import time
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ..exceptions import PoolTimeoutError, TaskFailedError
from ..models import AllocationEvent, RunStats
from ..parser import RecordingFile
from ..utils.file_utils import output_base_name
from .filters import IncludeFilter
from .pool import DEFAULT_TIMEOUT, CallerRunsExecutor, CancellationToken
from .presenter import ReportRow, render, write_report
from .table import ConcurrentAggregator
from .task import AllocationTask

logger = logging.getLogger(__name__)


@dataclass
class FlameResult:
    """一次运行的结果"""
    rows: List[ReportRow]
    files: List[Path]
    stats: RunStats = field(default_factory=RunStats)

    @property
    def total_bytes(self) -> int:
        return sum(total for _, total in self.rows)


def process_events(events: Iterable[AllocationEvent],
                   include_filter: Optional[IncludeFilter] = None,
                   max_workers: Optional[int] = None,
                   queue_size: Optional[int] = None,
                   timeout: Optional[float] = DEFAULT_TIMEOUT,
                   token: Optional[CancellationToken] = None,
                   stats: Optional[RunStats] = None) -> Mapping[str, int]:
    """
    并发聚合事件流

    事件由当前线程顺序读取，每个分配事件提交一个任务；
    所有任务排空后冻结聚合表并返回。

    Args:
        events: 事件序列（只遍历一次）
        include_filter: 包含过滤器，None 表示不过滤
        max_workers: worker 线程数
        queue_size: 排队任务上限
        timeout: 等待任务排空的最长秒数
        token: 取消标记
        stats: 统计信息

    Returns:
        Mapping[str, int]: 折叠栈 -> 总字节数

    Raises:
        PoolTimeoutError: 超时仍未排空
        TaskFailedError: 任务中出现非预期异常
        RunCancelledError: 运行被取消
    """
    if include_filter is None:
        include_filter = IncludeFilter()
    token = token or CancellationToken()
    stats = stats if stats is not None else RunStats()

    table = ConcurrentAggregator()
    executor = CallerRunsExecutor(max_workers=max_workers, queue_size=queue_size)
    logger.debug(f"线程池: max_workers={executor.max_workers}, queue_size={executor.queue_size}")

    try:
        for event in events:
            token.raise_if_cancelled()
            stats.increment('events_read')
            if not event.is_allocation:
                stats.increment('events_skipped')
                continue
            stats.increment('events_submitted')
            task = AllocationTask(event=event, include_filter=include_filter,
                                  table=table, stats=stats, token=token)
            executor.submit(task.run)
    except BaseException:
        # 让已排队的任务尽快结束，再把异常抛出去
        token.cancel()
        executor.shutdown()
        executor.await_termination(timeout)
        raise

    executor.shutdown()
    if not executor.await_termination(timeout):
        token.cancel()
        raise PoolTimeoutError(f"等待任务排空超时 ({timeout} 秒)")
    stats.caller_runs = executor.caller_runs

    errors = executor.errors
    if errors:
        raise TaskFailedError(f"{len(errors)} 个任务执行失败: {errors[0]}", errors[0])
    token.raise_if_cancelled()

    snapshot = table.freeze()
    stats.distinct_stacks = len(snapshot)
    return snapshot


def generate_flame_report(input_file: Union[str, Path],
                          include_filter: Optional[IncludeFilter] = None,
                          output_dir: Union[str, Path] = '.',
                          output_formats: Sequence[str] = ('txt',),
                          max_workers: Optional[int] = None,
                          queue_size: Optional[int] = None,
                          timeout: Optional[float] = DEFAULT_TIMEOUT,
                          token: Optional[CancellationToken] = None) -> FlameResult:
    """
    读取 recording 文件并生成折叠调用栈报告

    Args:
        input_file: recording JSON 文件路径
        include_filter: 包含过滤器
        output_dir: 输出目录
        output_formats: 输出格式列表
        max_workers: worker 线程数
        queue_size: 排队任务上限
        timeout: 等待任务排空的最长秒数
        token: 取消标记

    Returns:
        FlameResult: 排序后的报告行、生成的文件和统计信息
    """
    # 先解析输出文件名，文件名不合法时不必读取输入
    base_name = output_base_name(input_file)
    stats = RunStats()

    start_time = time.time()
    print(f"正在解析文件: {input_file}")
    with RecordingFile(input_file) as recording:
        table = process_events(
            recording,
            include_filter=include_filter,
            max_workers=max_workers,
            queue_size=queue_size,
            timeout=timeout,
            token=token,
            stats=stats,
        )
    print(f"聚合完成: {stats.events_accepted} 个事件, {stats.distinct_stacks} 个调用栈, "
          f"耗时 {time.time() - start_time:.2f} 秒")
    if stats.events_submitted and not stats.events_accepted:
        logger.warning("没有事件被计入报告，请检查过滤条件或文件内容")

    rows = render(table)
    files = write_report(rows, output_dir, base_name, output_formats)
    return FlameResult(rows=rows, files=files, stats=stats)
