"""
折叠调用栈包含过滤
"""

from typing import FrozenSet, Iterable, Optional

from .stack_key import normalize_type_name


class IncludeFilter:
    """子串包含过滤器，未配置任何子串时接受所有调用栈"""

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        normalized = set()
        for pattern in patterns or ():
            pattern = pattern.strip()
            if pattern:
                normalized.add(normalize_type_name(pattern))
        self._patterns: FrozenSet[str] = frozenset(normalized)

    @classmethod
    def from_spec(cls, spec: Optional[str]) -> 'IncludeFilter':
        """由逗号分隔的字符串构建，例如 "com.foo,org.bar" """
        if not spec:
            return cls()
        return cls(spec.split(','))

    @property
    def patterns(self) -> FrozenSet[str]:
        return self._patterns

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def accepts(self, key: str) -> bool:
        if not self._patterns:
            return True
        return any(pattern in key for pattern in self._patterns)

    def __repr__(self):
        return f"IncludeFilter({sorted(self._patterns)})"
