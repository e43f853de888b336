# tests/test_aggregation.py
from datetime import date
from types import SimpleNamespace

from expense_tracker import aggregation
from expense_tracker.categories import CATEGORIES, Category
from tests.conftest import make_record


def test_single_record_summary():
    records = [make_record("2024-01-01", lunch=50, dinner=70)]

    totals = aggregation.category_totals(records)
    assert totals[Category.LUNCH] == 50
    assert totals[Category.DINNER] == 70
    assert aggregation.total(records) == 120
    assert aggregation.daily_average(records) == 120

    window = aggregation.summarize(records)
    assert window.record_count == 1
    assert window.highest.date == date(2024, 1, 1)
    assert window.highest.amount == 120
    assert window.lowest.amount == 120

def test_category_totals_keep_declared_order():
    totals = aggregation.category_totals([make_record("2024-01-01", extra=5, morning_tea=1)])
    assert list(totals) == list(CATEGORIES)

def test_total_is_sum_of_stored_totals():
    records = [
        make_record("2024-01-01", lunch=12.5, dinner=30),
        make_record("2024-01-02", morning_tea=3, extra=40.25),
        make_record("2024-01-03"),
    ]
    for r in records:
        assert r.total == sum(r.amount(c) for c in CATEGORIES)
    assert aggregation.total(records) == sum(r.total for r in records)

def test_missing_or_non_numeric_totals_count_as_zero():
    records = [SimpleNamespace(total=None), SimpleNamespace(total="abc"), SimpleNamespace(total=5)]
    assert aggregation.total(records) == 5

def test_reductions_are_order_independent():
    records = [
        make_record("2024-01-01", lunch=10, dinner=5),
        make_record("2024-01-02", lunch=0, dinner=20, extra=3),
        make_record("2024-01-03", morning_tea=4),
    ]
    reversed_records = list(reversed(records))

    assert aggregation.category_totals(records) == aggregation.category_totals(reversed_records)
    assert aggregation.category_transaction_counts(records) == aggregation.category_transaction_counts(reversed_records)

def test_transaction_counts_only_count_positive_amounts():
    records = [
        make_record("2024-01-01", lunch=10),
        make_record("2024-01-02", lunch=0, dinner=7),
        make_record("2024-01-03", lunch=3, dinner=1),
    ]
    counts = aggregation.category_transaction_counts(records)
    assert counts[Category.LUNCH] == 2
    assert counts[Category.DINNER] == 2
    assert counts[Category.EXTRA] == 0

def test_empty_window_degrades_to_zero():
    assert aggregation.total([]) == 0
    assert aggregation.daily_average([]) == 0
    assert aggregation.extremes([]) == (None, None)
    assert aggregation.most_frequent_category([]) is None

    window = aggregation.summarize([])
    assert window.record_count == 0
    assert window.total == 0
    assert window.daily_average == 0
    assert window.highest is None
    assert window.lowest is None
    assert all(v == 0 for v in window.category_totals.values())

def test_extremes_tie_break_returns_exact_records():
    first = make_record("2024-01-01", lunch=60)
    second = make_record("2024-01-02", dinner=60)

    highest, lowest = aggregation.extremes([first, second])

    assert highest is first
    assert lowest is second

def test_extremes_picks_max_and_min():
    records = [
        make_record("2024-01-01", lunch=40),
        make_record("2024-01-02", lunch=90),
        make_record("2024-01-03", lunch=10),
    ]
    highest, lowest = aggregation.extremes(records)
    assert highest.date == date(2024, 1, 2)
    assert lowest.date == date(2024, 1, 3)
    # Input order is untouched
    assert [r.date.day for r in records] == [1, 2, 3]

def test_most_frequent_category_prefers_declared_order_on_ties():
    records = [
        make_record("2024-01-01", dinner=10),
        make_record("2024-01-02", lunch=5),
    ]
    result = aggregation.most_frequent_category(records)
    assert result.category == Category.LUNCH
    assert result.label == "Lunch"
    assert result.count == 1

def test_most_frequent_category_uses_counts_not_amounts():
    records = [
        make_record("2024-01-01", extra=500, morning_tea=2),
        make_record("2024-01-02", morning_tea=2),
    ]
    assert aggregation.most_frequent_category(records).category == Category.MORNING_TEA

def test_category_breakdown_sorted_by_total():
    records = [
        make_record("2024-01-01", lunch=10, dinner=30),
        make_record("2024-01-02", dinner=5, extra=12),
    ]
    breakdown = aggregation.category_breakdown(records)

    assert [row.category for row in breakdown[:3]] == [Category.DINNER, Category.EXTRA, Category.LUNCH]
    assert breakdown[0].total == 35
    assert breakdown[0].transactions == 2
    assert breakdown[0].label == "Dinner"
    assert len(breakdown) == len(CATEGORIES)
