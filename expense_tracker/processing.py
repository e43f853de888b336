# expense_tracker/processing.py
import io
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Sequence, Union

import pandas as pd
from prefect import flow, get_run_logger, task
from sqlalchemy.orm import sessionmaker

from .categories import CATEGORY_FIELDS
from .database import init_db, make_engine, make_session_factory
from .schemas import ExpenseIn, ExpenseRecord
from .store import ExpenseStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1_000  # days per chunk; a decade of daily records is ~3,650 rows
REQUIRED_COLUMNS = {"date", *CATEGORY_FIELDS}
EXPORT_COLUMNS = ["date", *CATEGORY_FIELDS, "total"]


def _buffer(source: Union[bytes, str, Path]):
    if isinstance(source, bytes):
        return io.StringIO(source.decode('utf-8'))
    return source


def _check_columns(df: pd.DataFrame):
    if not REQUIRED_COLUMNS.issubset(df.columns):
        missing_cols = sorted(REQUIRED_COLUMNS - set(df.columns))
        raise ValueError(f"CSV file is missing required columns: {', '.join(missing_cols)}")


def _clean_chunk(chunk_df: pd.DataFrame) -> pd.DataFrame:
    """Parses dates, coerces amounts to numbers (blank/garbage -> 0) and keeps one row per day."""
    _check_columns(chunk_df)

    # This will raise a ValueError if a date is not YYYY-MM-DD
    dates = pd.to_datetime(chunk_df['date'], format='%Y-%m-%d')
    if dates.isna().any():
        # header is line 1
        line = dates.index[dates.isna()][0] + 2
        raise ValueError(f"missing date on line {line}")
    chunk_df['date'] = dates.dt.date

    for column in CATEGORY_FIELDS:
        chunk_df[column] = pd.to_numeric(chunk_df[column], errors='coerce').fillna(0.0)

    negative = (chunk_df[list(CATEGORY_FIELDS)] < 0).any(axis=1)
    if negative.any():
        first_bad = chunk_df.loc[negative, 'date'].iloc[0]
        raise ValueError(f"negative amount on {first_bad}")

    return chunk_df.drop_duplicates(subset='date', keep='last')


def read_days(source: Union[bytes, str, Path]) -> Dict[date, ExpenseIn]:
    """
    Parses the whole CSV, chunk by chunk, into one validated expense per day.

    Args:
        source: CSV contents as bytes, or a path to a CSV file

    Returns:
        Dict[date, ExpenseIn]: The day's amounts keyed by date; the last row for a date wins

    Raises:
        ValueError: If any row of the file is invalid
    """
    days: Dict[date, ExpenseIn] = {}
    try:
        for chunk_df in pd.read_csv(_buffer(source), chunksize=CHUNK_SIZE):
            chunk_df = _clean_chunk(chunk_df)
            for row in chunk_df.itertuples(index=False):
                days[row.date] = ExpenseIn(**{column: getattr(row, column) for column in CATEGORY_FIELDS})
    # ParserError and EmptyDataError are ValueErrors too, so they go first
    except pd.errors.EmptyDataError:
        raise ValueError("Invalid CSV format: file is empty")
    except pd.errors.ParserError as e:
        raise ValueError(f"Invalid CSV format: {e}")
    except ValueError as e:
        raise ValueError(f"CSV file contains corrupt or malformed data: {e}")
    return days


def validate_csv_format(file_contents: bytes):
    """
    Validates every row of the CSV without writing anything.

    Args:
        file_contents: The CSV file contents as bytes

    Raises:
        ValueError: If the CSV format is invalid
    """
    read_days(file_contents)


def import_csv(source: Union[bytes, str, Path], user_id: str, session_factory: sessionmaker) -> int:
    """
    Upserts every day in the CSV as one of the user's records.

    The file is written in a single transaction: when any day fails, none of
    them are kept.

    Args:
        source: CSV contents as bytes, or a path to a CSV file
        user_id: Owner of the imported days
        session_factory: Builds the session the file is written in

    Returns:
        int: Number of days written
    """
    days = read_days(source)

    session = session_factory()
    try:
        store = ExpenseStore(session)
        for day, expense in days.items():
            store.upsert_by_user_and_date(user_id, day, expense, commit=False)
        store.commit()
    except Exception:
        session.rollback()
        logger.error("Import for %s rolled back; no days were written", user_id)
        raise
    finally:
        session.close()

    logger.info("Imported %d days for %s", len(days), user_id)
    return len(days)


def export_csv(records: Sequence[ExpenseRecord]) -> str:
    df = pd.DataFrame(
        [{column: getattr(r, column) for column in EXPORT_COLUMNS} for r in records],
        columns=EXPORT_COLUMNS,
    )
    df['date'] = df['date'].astype(str)
    return df.to_csv(index=False)


@task
def process_csv_to_db(file_path: str, user_id: str, database_url: str) -> int:
    engine = make_engine(database_url)
    try:
        init_db(engine)
        return import_csv(Path(file_path), user_id, make_session_factory(engine))
    finally:
        engine.dispose()


@flow(name="Daily Expense CSV Import")
def run_csv_pipeline(file_path: str, user_id: str, database_url: str):
    """Imports a CSV of daily expenses that was dropped into the shared upload directory."""
    run_logger = get_run_logger()
    rows = process_csv_to_db(file_path=file_path, user_id=user_id, database_url=database_url)
    run_logger.info("Imported %s days from %s", rows, file_path)
    return rows
