"""
Business day arithmetic.

A business day is any Monday to Friday. Exchange holiday calendars are not
modelled: a holiday simply yields no upstream records for that date.
"""

from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

SATURDAY = 5
SUNDAY = 6

WINDOW_SIZE = 3


class Direction(str, Enum):
    """Direction to step through the calendar."""
    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def delta(self) -> timedelta:
        return timedelta(days=1) if self is Direction.FORWARD else timedelta(days=-1)


def is_business_day(day: date) -> bool:
    """Check whether ``day`` falls on a weekday."""
    return day.weekday() not in (SATURDAY, SUNDAY)


def step(day: date, direction: Direction) -> date:
    """
    Return the nearest business day strictly before or after ``day``.

    Args:
        day: Starting date (need not itself be a business day)
        direction: ``Direction.FORWARD`` or ``Direction.BACKWARD``

    Returns:
        The first weekday reached moving one day at a time in ``direction``
    """
    direction = Direction(direction)
    current = day + direction.delta
    while not is_business_day(current):
        current += direction.delta
    return current


def previous_business_days(anchor: date, count: int) -> List[date]:
    """
    Compute the ``count`` most recent business days strictly before ``anchor``.

    Args:
        anchor: Reference date, never included in the result
        count: Number of business days to return

    Returns:
        Dates ordered newest-first
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    days: List[date] = []
    current = anchor
    while len(days) < count:
        current = step(current, Direction.BACKWARD)
        days.append(current)
    return days


def analysis_window(anchor: date, size: int = WINDOW_SIZE) -> List[date]:
    """Anchor date followed by the ``size - 1`` preceding business days."""
    if size < 1:
        raise ValueError(f"window size must be at least 1, got {size}")
    return [anchor] + previous_business_days(anchor, size - 1)


def navigate(day: date, direction: Direction, today: Optional[date] = None) -> date:
    """
    Step to the adjacent business day, refusing to move into the future.

    A forward step that would land after ``today`` leaves ``day`` unchanged.
    """
    target = step(day, direction)
    today = today or date.today()
    if Direction(direction) is Direction.FORWARD and target > today:
        return day
    return target
