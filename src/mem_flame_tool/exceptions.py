# -*- coding: utf-8 -*-
"""
异常类型定义
"""


class MemFlameError(Exception):
    """所有 mem_flame_tool 异常的基类"""


class DescriptorError(MemFlameError, ValueError):
    """类型描述符格式错误"""


class InvalidArgumentError(MemFlameError, ValueError):
    """命令行参数或文件名不合法"""


class RecordingFormatError(MemFlameError):
    """输入文件不是可解析的 recording JSON"""


class PoolTimeoutError(MemFlameError):
    """等待任务队列排空超时"""


class TaskFailedError(MemFlameError):
    """任务执行过程中出现非预期异常"""

    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.cause = cause


class RunCancelledError(MemFlameError):
    """运行被取消"""
