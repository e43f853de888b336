# expense_tracker/insights.py
"""
Turns aggregated spending into human readable notices and the long-range
insights report (weekly/monthly totals, top days, next week estimate).
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from . import aggregation
from .categories import CATEGORIES, CATEGORY_FIELDS, Category
from .config import Settings
from .schemas import (
    ExpenseRecord,
    Insight,
    InsightsReport,
    MonthlyTrend,
    Prediction,
    TopSpendingDay,
)
from .trends import classify_trend, percent_change, split_windows


@dataclass(frozen=True)
class InsightPolicy:
    unusual_multiplier: float = 1.5
    concentration_share: float = 0.40
    category_rise_percent: float = 25.0
    trend_window: int = 7
    trend_threshold_percent: float = 10.0
    top_days: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> "InsightPolicy":
        return cls(
            unusual_multiplier=settings.UNUSUAL_EXPENSE_MULTIPLIER,
            concentration_share=settings.CONCENTRATION_SHARE,
            category_rise_percent=settings.CATEGORY_RISE_PERCENT,
            trend_window=settings.TREND_WINDOW_DAYS,
            trend_threshold_percent=settings.TREND_THRESHOLD_PERCENT,
            top_days=settings.TOP_SPENDING_DAYS,
        )


def format_currency(amount: float) -> str:
    text = f"${amount:,.2f}"
    return text[:-3] if text.endswith(".00") else text


# --- Notices ---

def category_insights(records: Sequence[ExpenseRecord]) -> List[Insight]:
    """Where the money went: the largest category and its share."""
    window_total = aggregation.total(records)
    if window_total <= 0:
        return []
    breakdown = aggregation.category_breakdown(records)
    top = breakdown[0]
    share = top.total / window_total
    return [Insight(
        type="info",
        message=f"{top.label} is your largest category at {share:.0%} of your spending "
                f"({top.transactions} of {len(records)} days).",
        amount=top.total,
        category=top.category,
    )]


def unusual_expenses(records: Sequence[ExpenseRecord], policy: InsightPolicy) -> List[Insight]:
    """Days whose total is well above the window's daily average."""
    if len(records) < 2:
        return []
    limit = aggregation.daily_average(records) * policy.unusual_multiplier
    return [
        Insight(
            type="warning",
            message=f"You spent {format_currency(record.total)} on {record.date.isoformat()}, "
                    f"more than {policy.unusual_multiplier:g}x your daily average.",
            amount=record.total,
        )
        for record in records
        if record.total > limit
    ]


def saving_opportunities(records: Sequence[ExpenseRecord], policy: InsightPolicy) -> List[Insight]:
    """
    Categories worth cutting back on: those taking more than
    `concentration_share` of the spend, and those rising faster than
    `category_rise_percent` (and faster than spending overall).
    """
    window_total = aggregation.total(records)
    if window_total <= 0:
        return []

    insights = []
    totals = aggregation.category_totals(records)
    for category in CATEGORIES:
        share = totals[category] / window_total
        if share > policy.concentration_share:
            insights.append(Insight(
                type="saving",
                message=f"{category.label} makes up {share:.0%} of your spending. "
                        f"Trimming it by 10% would save about {format_currency(totals[category] * 0.1)}.",
                amount=totals[category],
                category=category,
            ))

    prior, recent = split_windows(records, policy.trend_window)
    if not prior:
        return insights
    prior_total = aggregation.daily_average(prior)
    overall_change = percent_change(prior_total, aggregation.daily_average(recent)) if prior_total else 0.0
    prior_totals = aggregation.category_totals(prior)
    recent_totals = aggregation.category_totals(recent)
    for category in CATEGORIES:
        prior_avg = prior_totals[category] / len(prior)
        recent_avg = recent_totals[category] / len(recent)
        if prior_avg == 0:
            continue
        change = percent_change(prior_avg, recent_avg)
        if change > policy.category_rise_percent and change > overall_change:
            insights.append(Insight(
                type="saving",
                message=f"{category.label} spending is up {change:.0f}% on the previous "
                        f"{len(prior)} days, faster than your overall spending.",
                amount=recent_avg - prior_avg,
                category=category,
            ))
    return insights


def generate_insights(records: Sequence[ExpenseRecord], policy: InsightPolicy = InsightPolicy()) -> List[Insight]:
    return [
        *category_insights(records),
        *unusual_expenses(records, policy),
        *saving_opportunities(records, policy),
    ]


# --- Long range report ---

def _frame(records: Sequence[ExpenseRecord]) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"date": r.date, "total": r.total, **{f: getattr(r, f) for f in CATEGORY_FIELDS}} for r in records],
        columns=["date", "total", *CATEGORY_FIELDS],
    )
    df["date"] = pd.to_datetime(df["date"])
    return df


def daily_category_averages(records: Sequence[ExpenseRecord]) -> Dict[Category, float]:
    if not records:
        return {}
    totals = aggregation.category_totals(records)
    return {category: totals[category] / len(records) for category in CATEGORIES}


def weekly_totals(records: Sequence[ExpenseRecord]) -> Dict[str, float]:
    """Totals keyed by ISO week, e.g. '2024-W01'."""
    if not records:
        return {}
    df = _frame(records)
    iso = df["date"].dt.isocalendar()
    df["week"] = iso["year"].astype(str) + "-W" + iso["week"].astype(str).str.zfill(2)
    return {week: float(value) for week, value in df.groupby("week", sort=True)["total"].sum().items()}


def monthly_trends(records: Sequence[ExpenseRecord]) -> List[MonthlyTrend]:
    if not records:
        return []
    df = _frame(records)
    df["month"] = df["date"].dt.strftime("%Y-%m")
    grouped = df.groupby("month", sort=True)["total"].agg(["sum", "count"])
    return [
        MonthlyTrend(month=month, total=float(row["sum"]), average=float(row["sum"]) / int(row["count"]))
        for month, row in grouped.iterrows()
    ]


def top_spending_days(records: Sequence[ExpenseRecord], limit: int = 5) -> List[TopSpendingDay]:
    ranked = sorted(records, key=lambda r: r.total, reverse=True)[:limit]
    return [
        TopSpendingDay(
            date=r.date,
            total=r.total,
            breakdown={c.label: r.amount(c) for c in CATEGORIES},
        )
        for r in ranked
    ]


def next_week_estimate(records: Sequence[ExpenseRecord]) -> float:
    return aggregation.daily_average(records) * 7


def predictions(records: Sequence[ExpenseRecord], policy: InsightPolicy = InsightPolicy()) -> Prediction:
    trend = classify_trend(records, policy.trend_window, policy.trend_threshold_percent)
    return Prediction(next_week_estimate=next_week_estimate(records), trend_description=trend.description)


def build_report(records: Sequence[ExpenseRecord], policy: InsightPolicy = InsightPolicy()) -> InsightsReport:
    return InsightsReport(
        daily_averages=daily_category_averages(records),
        weekly_totals=weekly_totals(records),
        monthly_trends=monthly_trends(records),
        top_spending_days=top_spending_days(records, policy.top_days),
        predictions=predictions(records, policy),
    )
