# expense_tracker/seed.py
import argparse
import csv
import uuid
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from faker import Faker
from prefect import flow, get_run_logger, task

from .categories import CATEGORY_FIELDS
from .config import settings
from .processing import run_csv_pipeline

HEADERS = ["date", *CATEGORY_FIELDS]

# Typical price range per category; 'extra' is often skipped entirely
PRICE_RANGES = {
    "morning_tea": (10.0, 30.0),
    "morning_breakfast": (40.0, 120.0),
    "lunch": (80.0, 250.0),
    "afternoon_tea": (10.0, 30.0),
    "afternoon_breakfast": (30.0, 90.0),
    "dinner": (100.0, 300.0),
    "extra": (0.0, 500.0),
}
SKIP_CHANCE = 0.25


def fake_day(fake: Faker) -> dict:
    row = {}
    for column in CATEGORY_FIELDS:
        low, high = PRICE_RANGES[column]
        if fake.random.random() < SKIP_CHANCE:
            row[column] = 0
        else:
            row[column] = round(fake.random.uniform(low, high), 2)
    return row


def write_expense_csv(file_path: Path, days: int, end: Optional[date] = None, seed: Optional[int] = None) -> Path:
    """Writes `days` consecutive days of made-up spending ending on `end` (default yesterday)."""
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)
    end = end or date.today() - timedelta(days=1)

    with open(file_path, mode="w", newline="") as file:
        writer = csv.DictWriter(file, fieldnames=HEADERS)
        writer.writeheader()
        for offset in range(days - 1, -1, -1):
            writer.writerow({"date": (end - timedelta(days=offset)).isoformat(), **fake_day(fake)})

    return file_path


@task
def generate_expense_csv(days: int):
    file_path = Path(settings.UPLOAD_DIR) / f"seed_batch_{uuid.uuid4()}.csv"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    write_expense_csv(file_path, days)
    return str(file_path)


@flow(name="Demo Expense Seeder")
def run_seed_generation(user_id: str, days: int = 60):
    """
    Generates `days` of dummy daily expenses for a user and imports them.
    """
    get_run_logger().info("Seeding %s days for %s", days, user_id)
    file_path = generate_expense_csv(days=days)
    run_csv_pipeline(file_path=file_path, user_id=user_id, database_url=settings.get_database_url())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate dummy daily expense data.")
    parser.add_argument("--days", type=int, default=60, help="Number of days to generate")
    parser.add_argument("--output", default="dummy_expenses.csv", help="Where to write the CSV")
    parser.add_argument("--seed", type=int, default=None, help="Seed for repeatable output")
    args = parser.parse_args()

    print(f"Wrote {args.days} days to {write_expense_csv(Path(args.output), args.days, seed=args.seed)}")
