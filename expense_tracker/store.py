# expense_tracker/store.py
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import DailyExpense, utcnow
from .schemas import ExpenseIn, ExpenseRecord

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The record store could not complete a read or write."""


class ExpenseStore:
    """
    Translates between ExpenseRecord and the daily_expenses table.

    The session is owned by the caller; this class never opens connections
    on its own.
    """

    def __init__(self, session: Session):
        self.session = session

    def fetch_by_user_and_date_range(self, user_id: str, start_date: date, end_date: date) -> List[ExpenseRecord]:
        """Records for the user between both dates (inclusive), ascending by date."""
        query = (
            select(DailyExpense)
            .where(DailyExpense.user_id == user_id)
            .where(DailyExpense.date >= start_date)
            .where(DailyExpense.date <= end_date)
            .order_by(DailyExpense.date.asc())
        )
        rows = self._execute(query, "fetch range")
        logger.debug("Fetched %d records for %s between %s and %s", len(rows), user_id, start_date, end_date)
        return [ExpenseRecord.model_validate(row) for row in rows]

    def fetch_all(self, user_id: str) -> List[ExpenseRecord]:
        query = (
            select(DailyExpense)
            .where(DailyExpense.user_id == user_id)
            .order_by(DailyExpense.date.asc())
        )
        return [ExpenseRecord.model_validate(row) for row in self._execute(query, "fetch all")]

    def fetch_by_user_and_date(self, user_id: str, day: date) -> Optional[ExpenseRecord]:
        row = self._get(DailyExpense.make_id(user_id, day))
        return ExpenseRecord.model_validate(row) if row is not None else None

    def upsert_by_user_and_date(self, user_id: str, day: date, expense: ExpenseIn, commit: bool = True) -> ExpenseRecord:
        """
        Creates the day's record, or overwrites it in place when one exists.
        - **created_at** survives an overwrite, **updated_at** is refreshed.
        - **commit**: False only flushes, leaving the caller to call commit()
        """
        doc_id = DailyExpense.make_id(user_id, day)
        try:
            row = self.session.get(DailyExpense, doc_id)
            if row is None:
                row = DailyExpense(id=doc_id, user_id=user_id, date=day)
                self.session.add(row)
            for category, value in expense.amounts().items():
                setattr(row, category.value, value)
            row.total = expense.total
            row.updated_at = utcnow()
            if commit:
                self.session.commit()
                self.session.refresh(row)
            else:
                self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to save expense %s", doc_id)
            raise StoreError(f"Could not save expense for {day}: {e}") from e

        logger.info("Saved expense %s (total %.2f)", doc_id, row.total)
        return ExpenseRecord.model_validate(row)

    def delete_by_id(self, user_id: str, doc_id: str) -> bool:
        """Deletes one of the user's records. Returns False when nothing matched."""
        row = self._get(doc_id)
        if row is None or row.user_id != user_id:
            return False
        try:
            self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to delete expense %s", doc_id)
            raise StoreError(f"Could not delete expense {doc_id}: {e}") from e

        logger.info("Deleted expense %s", doc_id)
        return True

    def commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to commit expenses")
            raise StoreError(f"Could not save expenses: {e}") from e

    def _get(self, doc_id: str) -> Optional[DailyExpense]:
        try:
            return self.session.get(DailyExpense, doc_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to load expense %s", doc_id)
            raise StoreError(f"Could not load expense {doc_id}: {e}") from e

    def _execute(self, query, action: str) -> List[DailyExpense]:
        try:
            return list(self.session.scalars(query).all())
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Record store query failed (%s)", action)
            raise StoreError(f"Record store query failed: {e}") from e

