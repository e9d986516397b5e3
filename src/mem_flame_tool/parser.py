"""
JFR recording JSON 解析器

读取 `jfr print --json` 输出的文档（可选 gzip 压缩），按顺序逐个产出分配事件。
"""

import json
import gzip
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union
import logging

from .exceptions import RecordingFormatError
from .models import AllocationEvent, Frame

logger = logging.getLogger(__name__)


def _binary_name(name: str) -> str:
    """JVM 内部形式的类名 (java/lang/String) 转为点分形式 (java.lang.String)"""
    return name.replace('/', '.')


def _parse_frames(stack_trace: Any) -> Optional[Tuple[Frame, ...]]:
    """
    解析调用栈帧列表

    Args:
        stack_trace: stackTrace 字段的原始数据

    Returns:
        Tuple[Frame, ...]: 按采集顺序（叶子在前）排列的帧，任一帧缺字段时返回 None
    """
    if not isinstance(stack_trace, dict):
        return None
    raw_frames = stack_trace.get('frames')
    if not isinstance(raw_frames, list):
        return None

    frames = []
    for raw_frame in raw_frames:
        method = raw_frame.get('method') if isinstance(raw_frame, dict) else None
        if not isinstance(method, dict):
            return None
        declaring_type = method.get('type')
        type_name = declaring_type.get('name') if isinstance(declaring_type, dict) else declaring_type
        method_name = method.get('name')
        if not isinstance(type_name, str) or not isinstance(method_name, str):
            return None
        frames.append(Frame(type_name=_binary_name(type_name), method_name=method_name))
    return tuple(frames)


def _parse_size(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_event(event_data: Any) -> AllocationEvent:
    """
    解析单个事件

    缺失或格式不对的字段记为 None，由后续任务判断事件是否适用。

    Args:
        event_data: 事件数据字典

    Returns:
        AllocationEvent: 解析后的事件对象
    """
    if not isinstance(event_data, dict):
        logger.warning(f"跳过无法识别的事件: {type(event_data).__name__}")
        return AllocationEvent(event_type='')

    event_type = event_data.get('type', '')
    if isinstance(event_type, dict):
        event_type = event_type.get('name', '')
    values = event_data.get('values', event_data)
    if not isinstance(values, dict):
        values = {}

    object_class = values.get('objectClass')
    if isinstance(object_class, dict):
        object_class = object_class.get('name')
    object_class = _binary_name(object_class) if isinstance(object_class, str) else None

    return AllocationEvent(
        event_type=str(event_type),
        stack_trace=_parse_frames(values.get('stackTrace')),
        object_class=object_class,
        allocation_size=_parse_size(values.get('allocationSize')),
    )


def _extract_raw_events(data: Any) -> List[Any]:
    """从文档中取出原始事件列表"""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        recording = data.get('recording')
        if isinstance(recording, dict) and isinstance(recording.get('events'), list):
            return recording['events']
        if isinstance(data.get('events'), list):
            return data['events']
    raise RecordingFormatError("文档中没有找到 events 列表")


class RecordingFile:
    """
    顺序、单次遍历的事件源

    用法与 jdk.jfr.consumer.RecordingFile 一致:

        with RecordingFile(path) as recording:
            while recording.has_more_events():
                event = recording.read_event()
    """

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        self._raw_events = self._load(self.file_path)
        self._position = 0
        self._closed = False

    @staticmethod
    def _load(file_path: Path) -> List[Any]:
        open_func = gzip.open if file_path.suffix == '.gz' else open
        try:
            with open_func(file_path, 'rt', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RecordingFormatError(f"无法解析文件 {file_path}: {e}") from e

        raw_events = _extract_raw_events(data)
        logger.info(f"读取到 {len(raw_events)} 个原始事件: {file_path}")
        return raw_events

    def has_more_events(self) -> bool:
        return not self._closed and self._position < len(self._raw_events)

    def read_event(self) -> AllocationEvent:
        """读取下一个事件，没有更多事件时抛出 EOFError"""
        if not self.has_more_events():
            raise EOFError("没有更多事件")
        raw_event = self._raw_events[self._position]
        # 已读取的原始数据不再持有
        self._raw_events[self._position] = None
        self._position += 1
        return _parse_event(raw_event)

    def __iter__(self) -> Iterator[AllocationEvent]:
        while self.has_more_events():
            yield self.read_event()

    def close(self) -> None:
        self._closed = True
        self._raw_events = []

    def __enter__(self) -> 'RecordingFile':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

