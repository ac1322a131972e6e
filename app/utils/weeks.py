"""
Week Window Calculator.

Computes the Monday–Friday boundaries used to bucket priorities into the
"current" and "next" week columns of the board.  Every function here is
pure: the only clock read happens in :func:`now_in_board_timezone`, and
callers pass its result along as an explicit reference instant.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.schemas.board import BoardWeeks, WeekBucket, WeekWindow
from app.utils.constants import MESES_CORTOS

_FRIDAY_OFFSET = timedelta(days=4)
_ONE_WEEK = timedelta(days=7)
_END_OF_DAY = time(23, 59, 59, 999_000)


def now_in_board_timezone(tz_name: str) -> datetime:
    """Return the current instant in the configured board timezone."""
    return datetime.now(ZoneInfo(tz_name))


def _as_datetime(reference: date | datetime) -> datetime:
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time.min)


def get_week_dates(reference: date | datetime) -> WeekWindow:
    """Return the Monday/Friday window of the ISO week containing *reference*.

    Monday is truncated to midnight and Friday is set to 23:59:59.999.
    The timezone of *reference* (or its absence) is preserved.

    Args:
        reference: Any instant or calendar date inside the wanted week.

    Returns:
        A ``WeekWindow``; identical references always give identical windows.
    """
    ref = _as_datetime(reference)
    monday = (ref - timedelta(days=ref.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    friday = (monday + _FRIDAY_OFFSET).replace(
        hour=_END_OF_DAY.hour,
        minute=_END_OF_DAY.minute,
        second=_END_OF_DAY.second,
        microsecond=_END_OF_DAY.microsecond,
    )
    return WeekWindow(monday=monday, friday=friday)


def get_board_weeks(reference: date | datetime) -> BoardWeeks:
    """Return the current and next week windows for *reference*."""
    current = get_week_dates(reference)
    return BoardWeeks(current=current, next=get_week_dates(current.monday + _ONE_WEEK))


def get_week_label(monday: date | datetime) -> str:
    """Render a short Spanish label such as ``"12 oct - 16 oct 2026"``."""
    friday = _as_datetime(monday) + _FRIDAY_OFFSET
    return (
        f"{monday.day} {MESES_CORTOS[monday.month - 1]} - "
        f"{friday.day} {MESES_CORTOS[friday.month - 1]} {friday.year}"
    )


def get_bucket_heading(bucket: WeekBucket, window: WeekWindow) -> str:
    """Heading shown above a week bucket, e.g. ``"Semana Actual (...)"``."""
    return f"{bucket.label} ({get_week_label(window.monday)})"
