# expense_tracker/models.py
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Index, String, UniqueConstraint

from .database import Base


def utcnow():
    return datetime.now(timezone.utc)


class DailyExpense(Base):
    """One row per user per calendar day."""
    __tablename__ = "daily_expenses"

    # Document id, "{user_id}_{date}"
    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    date = Column(Date, nullable=False)

    morning_tea = Column(Float, nullable=False, default=0.0)
    morning_breakfast = Column(Float, nullable=False, default=0.0)
    lunch = Column(Float, nullable=False, default=0.0)
    afternoon_tea = Column(Float, nullable=False, default=0.0)
    afternoon_breakfast = Column(Float, nullable=False, default=0.0)
    dinner = Column(Float, nullable=False, default=0.0)
    extra = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_expenses_user_date"),
        Index("idx_user_date", "user_id", "date"),
    )

    @staticmethod
    def make_id(user_id: str, day) -> str:
        return f"{user_id}_{day.isoformat()}"
