# expense_tracker/aggregation.py
"""
Pure aggregation over an already-fetched, date-ordered list of records.

None of these functions raise on empty input; they degrade to zero/None.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from .categories import CATEGORIES, Category
from .schemas import (
    AggregationWindow,
    CategoryCount,
    CategoryTotal,
    DayAmount,
    ExpenseRecord,
    coerce_amount,
)


def _total_of(record: ExpenseRecord) -> float:
    return coerce_amount(getattr(record, "total", None))


def _amount_of(record: ExpenseRecord, category: Category) -> float:
    return coerce_amount(getattr(record, category.value, None))


def total(records: Sequence[ExpenseRecord]) -> float:
    return sum(_total_of(r) for r in records)


def category_totals(records: Sequence[ExpenseRecord]) -> Dict[Category, float]:
    totals = {category: 0.0 for category in CATEGORIES}
    for record in records:
        for category in CATEGORIES:
            totals[category] += _amount_of(record, category)
    return totals


def category_transaction_counts(records: Sequence[ExpenseRecord]) -> Dict[Category, int]:
    """Per category, how many records spent something on it."""
    counts = {category: 0 for category in CATEGORIES}
    for record in records:
        for category in CATEGORIES:
            if _amount_of(record, category) > 0:
                counts[category] += 1
    return counts


def daily_average(records: Sequence[ExpenseRecord]) -> float:
    if not records:
        return 0.0
    return total(records) / len(records)


def extremes(records: Sequence[ExpenseRecord]) -> Tuple[Optional[ExpenseRecord], Optional[ExpenseRecord]]:
    """
    Returns (highest, lowest) day.

    Sorting is stable, so among equal totals the first record seen is the
    highest and the last record seen is the lowest.
    """
    if not records:
        return None, None
    by_total = sorted(records, key=_total_of, reverse=True)
    return by_total[0], by_total[-1]


def most_frequent_category(records: Sequence[ExpenseRecord]) -> Optional[CategoryCount]:
    counts = category_transaction_counts(records)
    # max() keeps the first of equal counts, i.e. declaration order wins ties
    category = max(CATEGORIES, key=lambda c: counts[c])
    if counts[category] == 0:
        return None
    return CategoryCount(category=category, label=category.label, count=counts[category])


def category_breakdown(records: Sequence[ExpenseRecord]) -> List[CategoryTotal]:
    """Category totals with transaction counts, largest spend first."""
    totals = category_totals(records)
    counts = category_transaction_counts(records)
    rows = [
        CategoryTotal(category=c, label=c.label, total=totals[c], transactions=counts[c])
        for c in CATEGORIES
    ]
    return sorted(rows, key=lambda row: row.total, reverse=True)


def _day(record: Optional[ExpenseRecord]) -> Optional[DayAmount]:
    if record is None:
        return None
    return DayAmount(date=record.date, amount=_total_of(record))


def summarize(records: Sequence[ExpenseRecord]) -> AggregationWindow:
    highest, lowest = extremes(records)
    return AggregationWindow(
        record_count=len(records),
        total=total(records),
        category_totals=category_totals(records),
        category_transaction_counts=category_transaction_counts(records),
        daily_average=daily_average(records),
        highest=_day(highest),
        lowest=_day(lowest),
        most_frequent_category=most_frequent_category(records),
    )
