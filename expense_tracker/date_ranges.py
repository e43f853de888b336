# expense_tracker/date_ranges.py
import calendar
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Tuple


class RangePreset(str, Enum):
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    LAST_30_DAYS = "last_30_days"


def month_bounds(day: date) -> Tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def resolve_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    preset: Optional[RangePreset] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Works out the window to aggregate over.

    Explicit dates win over a preset; a missing bound falls back to the
    current month's. Raises ValueError when start is after end.
    """
    today = today or date.today()

    if preset == RangePreset.LAST_MONTH:
        default_start, default_end = month_bounds(today.replace(day=1) - timedelta(days=1))
    elif preset == RangePreset.LAST_30_DAYS:
        default_start, default_end = today - timedelta(days=30), today
    else:
        default_start, default_end = month_bounds(today)

    start = start_date or default_start
    end = end_date or default_end
    if start > end:
        raise ValueError("start_date cannot be after end_date")
    return start, end
