"""
有界线程池，队列满时由提交线程自行执行任务
"""

import os
import threading
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from ..exceptions import RunCancelledError

logger = logging.getLogger(__name__)

# 等待任务排空的默认上限（秒）
DEFAULT_TIMEOUT = 24 * 60 * 60


def default_worker_count() -> int:
    """默认 worker 数为 CPU 核心数的两倍"""
    return 2 * (os.cpu_count() or 1)


class CancellationToken:
    """取消标记，生产者循环和每个任务开始时检查"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelledError("运行已被取消")


class CallerRunsExecutor:
    """
    有界任务执行器

    同时在途（排队 + 执行中）的任务数不超过 max_workers + queue_size。
    提交时若没有空位，任务直接在提交线程中执行，既不阻塞等待也不丢弃任务。

    关闭流程:
        executor.shutdown()
        if not executor.await_termination(timeout):
            ...  # 超时
    """

    def __init__(self, max_workers: Optional[int] = None, queue_size: Optional[int] = None):
        self.max_workers = max_workers or default_worker_count()
        self.queue_size = default_worker_count() if queue_size is None else queue_size
        if self.max_workers < 1 or self.queue_size < 0:
            raise ValueError(f"非法的线程池参数: max_workers={self.max_workers}, queue_size={self.queue_size}")

        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='mem-flame')
        self._slots = threading.BoundedSemaphore(self.max_workers + self.queue_size)
        self._idle = threading.Condition()
        self._pending = 0
        self._shutdown = False
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()
        self.caller_runs = 0

    @property
    def errors(self) -> List[BaseException]:
        with self._errors_lock:
            return list(self._errors)

    def _invoke(self, fn: Callable, args: tuple) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"任务执行出错: {e}", exc_info=True)
            with self._errors_lock:
                self._errors.append(e)

    def _run_queued(self, fn: Callable, args: tuple) -> None:
        try:
            self._invoke(fn, args)
        finally:
            self._slots.release()
            with self._idle:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.notify_all()

    def submit(self, fn: Callable, *args) -> None:
        """提交任务；没有空位时在当前线程执行"""
        if self._shutdown:
            raise RuntimeError("执行器已关闭，不能再提交任务")

        if not self._slots.acquire(blocking=False):
            self.caller_runs += 1
            self._invoke(fn, args)
            return

        with self._idle:
            self._pending += 1
        try:
            self._executor.submit(self._run_queued, fn, args)
        except BaseException:
            self._slots.release()
            with self._idle:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.notify_all()
            raise

    def shutdown(self) -> None:
        """声明不再提交新任务"""
        self._shutdown = True

    def await_termination(self, timeout: Optional[float] = DEFAULT_TIMEOUT) -> bool:
        """
        等待所有已提交任务执行完毕

        Args:
            timeout: 最长等待秒数，None 表示不限，超过 threading.TIMEOUT_MAX 时按其截断

        Returns:
            bool: 是否在超时前排空
        """
        if timeout is not None:
            timeout = min(timeout, threading.TIMEOUT_MAX)
        with self._idle:
            drained = self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)
        if drained:
            self._executor.shutdown(wait=True)
        else:
            self._executor.shutdown(wait=False, cancel_futures=True)
        return drained
