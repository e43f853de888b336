# expense_tracker/schemas.py
import math
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .categories import CATEGORY_FIELDS, Category

TOTAL_TOLERANCE = 0.005


def coerce_amount(value) -> float:
    """Missing, blank or non-numeric amounts count as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class ExpenseIn(BaseModel):
    """A day's spending as submitted by the client."""
    user_id: Optional[str] = None
    morning_tea: float = 0.0
    morning_breakfast: float = 0.0
    lunch: float = 0.0
    afternoon_tea: float = 0.0
    afternoon_breakfast: float = 0.0
    dinner: float = 0.0
    extra: float = 0.0
    total: Optional[float] = None

    @field_validator(*CATEGORY_FIELDS, mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return coerce_amount(value)

    @field_validator(*CATEGORY_FIELDS)
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("category amounts cannot be negative")
        return value

    @field_validator("total", mode="before")
    @classmethod
    def _coerce_total(cls, value):
        if value is None or value == "":
            return None
        return coerce_amount(value)

    @model_validator(mode="after")
    def _check_total(self):
        try:
            computed = math.fsum(self.amounts().values())
        except OverflowError:
            raise ValueError("category amounts are too large to total")
        if not math.isfinite(computed):
            raise ValueError("category amounts are too large to total")
        if self.total is not None and abs(self.total - computed) > TOTAL_TOLERANCE:
            raise ValueError(
                f"total {self.total} does not match the sum of the category amounts ({computed})"
            )
        self.total = computed
        return self

    def amounts(self) -> Dict[Category, float]:
        return {category: getattr(self, category.value) for category in Category}


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    date: date
    morning_tea: float = 0.0
    morning_breakfast: float = 0.0
    lunch: float = 0.0
    afternoon_tea: float = 0.0
    afternoon_breakfast: float = 0.0
    dinner: float = 0.0
    extra: float = 0.0
    total: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(*CATEGORY_FIELDS, "total", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return coerce_amount(value)

    def amount(self, category: Category) -> float:
        return getattr(self, category.value)


class DayAmount(BaseModel):
    date: date
    amount: float


class CategoryCount(BaseModel):
    category: Category
    label: str
    count: int


class CategoryTotal(BaseModel):
    category: Category
    label: str
    total: float
    transactions: int


class AggregationWindow(BaseModel):
    record_count: int
    total: float
    category_totals: Dict[Category, float]
    category_transaction_counts: Dict[Category, int]
    daily_average: float
    highest: Optional[DayAmount] = None
    lowest: Optional[DayAmount] = None
    most_frequent_category: Optional[CategoryCount] = None


class TrendResult(BaseModel):
    trend: Literal["increasing", "decreasing", "stable", "neutral"]
    description: str
    recent_average: Optional[float] = None
    prior_average: Optional[float] = None
    percent_change: Optional[float] = None


class Insight(BaseModel):
    type: Literal["saving", "warning", "info"]
    message: str
    amount: Optional[float] = None
    category: Optional[Category] = None


class DashboardStats(BaseModel):
    start_date: date
    end_date: date
    period_total: float
    daily_average: float
    highest: Optional[DayAmount] = None
    lowest: Optional[DayAmount] = None
    most_frequent_category: Optional[CategoryCount] = None
    spending_trend: TrendResult
    category_breakdown: List[CategoryTotal]
    next_week_estimate: float


class MonthlyTrend(BaseModel):
    month: str
    total: float
    average: float


class TopSpendingDay(BaseModel):
    date: date
    total: float
    breakdown: Dict[str, float]


class Prediction(BaseModel):
    next_week_estimate: float
    trend_description: str


class InsightsReport(BaseModel):
    daily_averages: Dict[Category, float]
    weekly_totals: Dict[str, float]
    monthly_trends: List[MonthlyTrend]
    top_spending_days: List[TopSpendingDay]
    predictions: Prediction


class Comparison(BaseModel):
    amount: float
    average: float
    # none: nothing spent; above/below/equal: against the average
    status: Literal["none", "above", "below", "equal"]


class CategoryComparison(Comparison):
    category: Category
    label: str


class DayOverview(BaseModel):
    date: date
    record: Optional[ExpenseRecord] = None
    previous_day_total: Optional[float] = None
    weekly_average: Optional[float] = None
    categories: List[CategoryComparison]
    total: Comparison


class SessionIn(BaseModel):
    id_token: str
