"""
预订时段锁 - 同一 (设施, 日期) 的冲突检查与写入串行执行

进程内互斥；多进程部署时由 BookingService 对设施行加 SELECT ... FOR UPDATE 补充
"""
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, Tuple

SlotKey = Tuple[int, date]


@dataclass
class _SlotLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class SlotLockRegistry:
    """按 (facility_id, date) 分配的锁，无人持有时自动回收"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[SlotKey, _SlotLock] = {}

    @contextmanager
    def hold(self, facility_id: int, day: date) -> Iterator[None]:
        key = (facility_id, day)
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = _SlotLock()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    self._locks.pop(key, None)

    def active_slots(self) -> int:
        """当前被持有或等待中的时段数"""
        with self._guard:
            return len(self._locks)


# 全局时段锁
slot_locks = SlotLockRegistry()
