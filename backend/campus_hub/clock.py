"""
时间源 - 所有审计时间戳都通过注入的 clock 获取，测试可以传入固定时刻
"""
from datetime import datetime, timedelta, UTC
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """当前 UTC 时间（naive，与数据库列保持一致）"""
    return datetime.now(UTC).replace(tzinfo=None)


class FixedClock:
    """固定时刻的时间源，可手动推进"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> datetime:
        """推进时间，参数同 timedelta"""
        self.instant = self.instant + timedelta(**kwargs)
        return self.instant
