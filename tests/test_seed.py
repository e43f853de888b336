# tests/test_seed.py
import csv
from datetime import date

from expense_tracker.processing import import_csv
from expense_tracker.seed import HEADERS, write_expense_csv
from expense_tracker.store import ExpenseStore
from tests.conftest import USER_ID


def test_write_expense_csv(tmp_path):
    path = write_expense_csv(tmp_path / "seed.csv", days=10, end=date(2024, 1, 31), seed=7)

    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))

    assert list(rows[0]) == HEADERS
    assert len(rows) == 10
    assert rows[0]["date"] == "2024-01-22"
    assert rows[-1]["date"] == "2024-01-31"
    assert all(float(row[column]) >= 0 for row in rows for column in HEADERS[1:])

def test_seeded_output_is_repeatable(tmp_path):
    first = write_expense_csv(tmp_path / "a.csv", days=5, end=date(2024, 1, 31), seed=42)
    second = write_expense_csv(tmp_path / "b.csv", days=5, end=date(2024, 1, 31), seed=42)
    assert first.read_text() == second.read_text()

def test_generated_csv_imports(tmp_path, session_factory, db_session):
    path = write_expense_csv(tmp_path / "seed.csv", days=20, end=date(2024, 1, 31), seed=1)

    assert import_csv(path, USER_ID, session_factory) == 20

    records = ExpenseStore(db_session).fetch_all(USER_ID)
    assert len(records) == 20
    assert records[0].date == date(2024, 1, 12)
