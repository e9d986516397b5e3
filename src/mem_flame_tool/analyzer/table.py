"""
并发聚合表
"""

import threading
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional


DEFAULT_SHARDS = 64


class ConcurrentAggregator:
    """
    折叠调用栈 -> 分配字节数 的线程安全累加表

    表被切成若干分片，每个分片由独立的锁保护。add 在分片锁内完成
    "不存在则插入 0，再累加"，所以任意并发顺序下都不会丢失或重复累加。
    聚合阶段结束前不允许读取，freeze 之后不允许写入。
    """

    def __init__(self, num_shards: int = DEFAULT_SHARDS):
        if num_shards < 1:
            raise ValueError(f"分片数必须为正数: {num_shards}")
        self._shards: List[Dict[str, int]] = [{} for _ in range(num_shards)]
        self._locks = [threading.Lock() for _ in range(num_shards)]
        self._frozen: Optional[Mapping[str, int]] = None
        self._freeze_lock = threading.Lock()

    def _shard_index(self, key: str) -> int:
        return hash(key) % len(self._shards)

    def add(self, key: str, amount: int) -> None:
        """
        为 key 累加 amount 字节

        Raises:
            ValueError: amount 不是非负整数
            RuntimeError: 聚合表已经冻结
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"分配大小必须为非负整数: {amount!r}")

        index = self._shard_index(key)
        with self._locks[index]:
            if self._frozen is not None:
                raise RuntimeError("聚合表已冻结，不能继续写入")
            shard = self._shards[index]
            shard[key] = shard.get(key, 0) + amount

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def freeze(self) -> Mapping[str, int]:
        """
        声明聚合阶段结束，合并所有分片并返回只读映射

        只能在所有任务排空之后调用；重复调用返回同一个映射。
        """
        with self._freeze_lock:
            if self._frozen is not None:
                return self._frozen
            for lock in self._locks:
                lock.acquire()
            try:
                merged: Dict[str, int] = {}
                for shard in self._shards:
                    merged.update(shard)
                self._frozen = MappingProxyType(merged)
            finally:
                for lock in self._locks:
                    lock.release()
            return self._frozen

    def snapshot(self) -> Mapping[str, int]:
        """返回冻结后的只读映射"""
        if self._frozen is None:
            raise RuntimeError("聚合阶段尚未结束，不能读取聚合表")
        return self._frozen

    def __len__(self) -> int:
        return len(self.snapshot())
