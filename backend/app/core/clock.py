"""
Wall clock used by the weekly contest.

The contest runs on the institute's local day (Saturday registration,
Sunday evaluation), so "now" is expressed at a fixed UTC offset and kept
naive, matching the naive datetimes stored in the database.

Handlers receive the clock through the get_contest_clock dependency so a
test, or an operator replaying a week, can pin it.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.config import settings


def utcnow() -> datetime:
    """Naive UTC now (the convention for stored timestamps)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ContestClock:
    """Clock reporting local contest time"""

    def __init__(self, utc_offset_minutes: Optional[int] = None):
        if utc_offset_minutes is None:
            utc_offset_minutes = settings.CONTEST_UTC_OFFSET_MINUTES
        self.offset = timedelta(minutes=utc_offset_minutes)

    def now(self) -> datetime:
        return utcnow() + self.offset

    def to_utc(self, local: datetime) -> datetime:
        return local - self.offset

    def to_local(self, utc: datetime) -> datetime:
        return utc + self.offset


class FrozenClock(ContestClock):
    """Clock pinned to a fixed local time"""

    def __init__(self, frozen_at: datetime, utc_offset_minutes: int = 0):
        super().__init__(utc_offset_minutes)
        self.frozen_at = frozen_at

    def now(self) -> datetime:
        return self.frozen_at

    def advance(self, **kwargs) -> None:
        self.frozen_at = self.frozen_at + timedelta(**kwargs)


_default_clock = ContestClock()


def get_contest_clock() -> ContestClock:
    """FastAPI dependency"""
    return _default_clock
