"""
变化追踪器

为每个指标序列保存上一次观测值，计算本次与上次的差值。
状态仅存在于进程生命周期内，不持久化。
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoBaseline:
    """首次观测: 当前值成为基线，没有可比较的上一次值"""
    current: float

    @property
    def diff(self) -> Optional[float]:
        return None


@dataclass(frozen=True)
class Delta:
    """diff = current - previous baseline"""
    current: float
    diff: float


ChangeResult = Union[NoBaseline, Delta]


@dataclass
class ChangeState:
    """单个序列的可变状态"""
    previous_value: float = 0.0
    has_baseline: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class ChangeTracker:
    """
    多序列变化追踪器

    每个序列有独立的锁，读-改-写作为一个原子单元执行;
    锁只在比较并替换基线期间持有，绝不跨越网络 I/O。
    """

    def __init__(self, series_ids: Iterable[str] = ()):
        self._states: Dict[str, ChangeState] = {}
        self._registry_lock = threading.Lock()
        for series_id in series_ids:
            self._state(series_id)

    def _state(self, series_id: str) -> ChangeState:
        with self._registry_lock:
            state = self._states.get(series_id)
            if state is None:
                state = ChangeState()
                self._states[series_id] = state
            return state

    def observe(self, series_id: str, current: float) -> ChangeResult:
        """记录一次观测，返回 NoBaseline 或 Delta"""
        state = self._state(series_id)
        with state.lock:
            if not state.has_baseline:
                state.previous_value = current
                state.has_baseline = True
                result: ChangeResult = NoBaseline(current=current)
            else:
                result = Delta(current=current, diff=current - state.previous_value)
                state.previous_value = current

        logger.debug(f"observe {series_id}: {result}")
        return result

    def baseline(self, series_id: str) -> Optional[float]:
        """当前基线 (未建立时为 None)"""
        state = self._states.get(series_id)
        if state is None:
            return None
        with state.lock:
            return state.previous_value if state.has_baseline else None

    def snapshot(self) -> Dict[str, Optional[float]]:
        with self._registry_lock:
            series_ids = list(self._states)
        return {series_id: self.baseline(series_id) for series_id in series_ids}

    def __len__(self) -> int:
        return len(self._states)
