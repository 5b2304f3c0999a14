"""
Contest calendar - which week it is and which phase the contest is in.

Every function takes the local "now" explicitly; callers get it from the
injected ContestClock. The week number is a simple day count from Jan 1
rather than ISO-8601 because stored contestant rows are keyed by it.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.models.contest import ContestPhase

SATURDAY = 5  # datetime.weekday()
SUNDAY = 6


@dataclass(frozen=True)
class ContestWeekKey:
    week_number: int
    year: int


def get_week(now: datetime) -> ContestWeekKey:
    """Week number = ceil(elapsed time since Jan 1 00:00 / 7 days)"""
    start_of_year = datetime(now.year, 1, 1)
    elapsed = (now - start_of_year) / timedelta(days=7)
    return ContestWeekKey(week_number=math.ceil(elapsed), year=now.year)


def week_of(moment: datetime) -> ContestWeekKey:
    """Week key for a stored timestamp"""
    return get_week(moment)


def derived_phase(now: datetime) -> ContestPhase:
    weekday = now.weekday()
    if weekday == SATURDAY:
        return ContestPhase.REGISTRATION
    if weekday == SUNDAY:
        return ContestPhase.EVALUATION
    return ContestPhase.DISPLAY


def effective_phase(now: datetime, override: Optional[ContestPhase] = None) -> ContestPhase:
    """Admin override wins over the calendar"""
    return override or derived_phase(now)


def is_registration_open(now: datetime, override: Optional[ContestPhase] = None) -> bool:
    return effective_phase(now, override) == ContestPhase.REGISTRATION


def is_evaluation_period(now: datetime, override: Optional[ContestPhase] = None) -> bool:
    return effective_phase(now, override) == ContestPhase.EVALUATION


def is_display_period(now: datetime, override: Optional[ContestPhase] = None) -> bool:
    return effective_phase(now, override) == ContestPhase.DISPLAY


def next_sunday_midnight(now: datetime) -> datetime:
    """
    Midnight at the start of the next Sunday.

    From a Sunday this is the following Sunday, so a winner approved during
    evaluation stays on display for the whole week.
    """
    days_ahead = (SUNDAY - now.weekday()) % 7 or 7
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(days=days_ahead)
