# tests/test_schemas.py
import pytest
from pydantic import ValidationError

from expense_tracker.categories import Category
from expense_tracker.schemas import ExpenseIn, ExpenseRecord, coerce_amount


@pytest.mark.parametrize("value", [None, "", "abc", float("nan"), float("inf"), True, [1]])
def test_coerce_amount_falls_back_to_zero(value):
    assert coerce_amount(value) == 0

def test_coerce_amount_parses_numeric_strings():
    assert coerce_amount("12.5") == 12.5
    assert coerce_amount(3) == 3.0

def test_missing_and_garbage_amounts_become_zero():
    expense = ExpenseIn(lunch="abc", dinner=None, extra="", morning_tea="4.5")

    assert expense.lunch == 0
    assert expense.dinner == 0
    assert expense.extra == 0
    assert expense.morning_tea == 4.5
    assert expense.total == 4.5

def test_total_is_computed_from_amounts():
    expense = ExpenseIn(lunch=50, dinner=70)
    assert expense.total == 120
    assert expense.amounts()[Category.LUNCH] == 50

def test_matching_total_is_accepted():
    assert ExpenseIn(lunch=0.1, dinner=0.2, total=0.3).total == pytest.approx(0.3)

def test_mismatched_total_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        ExpenseIn(lunch=50, dinner=70, total=100)
    assert "does not match" in str(excinfo.value)

def test_negative_amount_is_rejected():
    with pytest.raises(ValidationError):
        ExpenseIn(lunch=-5)

def test_record_coerces_stored_values():
    record = ExpenseRecord(user_id="u", date="2024-01-01", lunch=None, total="oops")
    assert record.lunch == 0
    assert record.total == 0

def test_category_labels():
    assert Category.MORNING_TEA.label == "Morning Tea"
    assert Category.AFTERNOON_BREAKFAST.label == "Afternoon Breakfast"

@pytest.mark.parametrize("amounts", [
    {"lunch": 1e308, "dinner": 1e308},
    {"lunch": 1.7e308, "dinner": 1.7e308, "extra": 1e308},
])
def test_amounts_too_large_to_total_are_rejected(amounts):
    with pytest.raises(ValidationError) as excinfo:
        ExpenseIn(**amounts)
    assert "too large to total" in str(excinfo.value)
