# expense_tracker/daily.py
"""
Single-day view: the day's record next to the previous day, the surrounding
week and the per-category averages of that week.
"""
import math
from datetime import date, timedelta
from typing import Optional, Sequence, Tuple

from . import aggregation
from .categories import CATEGORIES
from .insights import daily_category_averages
from .schemas import CategoryComparison, Comparison, DayOverview, ExpenseIn, ExpenseRecord

WEEK_LOOKBACK_DAYS = 7


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def week_window(day: date) -> Tuple[date, date]:
    """The day itself and the seven days before it, both ends inclusive."""
    return day - timedelta(days=WEEK_LOOKBACK_DAYS), day


def compare(amount: float, average: float) -> str:
    if amount == 0:
        return "none"
    if amount > average:
        return "above"
    if amount < average:
        return "below"
    return "equal"


def build_overview(
    day: date,
    record: Optional[ExpenseRecord],
    previous: Optional[ExpenseRecord],
    week: Sequence[ExpenseRecord],
) -> DayOverview:
    """
    Args:
        day: The selected day
        record: The day's record, if one was saved
        previous: The record for the day before, if one was saved
        week: Records in week_window(day)
    """
    averages = daily_category_averages(week)

    categories = []
    for category in CATEGORIES:
        amount = record.amount(category) if record is not None else 0.0
        average = averages.get(category, 0.0)
        categories.append(CategoryComparison(
            category=category,
            label=category.label,
            amount=amount,
            average=average,
            status=compare(amount, average),
        ))

    day_total = record.total if record is not None else 0.0
    average_total = math.fsum(averages.values())

    return DayOverview(
        date=day,
        record=record,
        previous_day_total=previous.total if previous is not None else None,
        weekly_average=aggregation.daily_average(week) if week else None,
        categories=categories,
        total=Comparison(amount=day_total, average=average_total, status=compare(day_total, average_total)),
    )


def copy_of(record: ExpenseRecord) -> ExpenseIn:
    """The record's amounts as a fresh submission, ready to save under another day."""
    return ExpenseIn(**{category.value: record.amount(category) for category in CATEGORIES})
