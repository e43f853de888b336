# expense_tracker/trends.py
from typing import Sequence

from .aggregation import daily_average
from .schemas import ExpenseRecord, TrendResult

INSUFFICIENT_DATA = (
    "Not enough data to determine spending trends. "
    "Continue tracking your expenses for more insights."
)
DESCRIPTIONS = {
    "increasing": (
        "Your spending has increased recently. Consider reviewing your daily "
        "expenses to identify areas for potential savings."
    ),
    "decreasing": "Great job! Your spending trend shows a decrease compared to previous weeks.",
    "stable": "Your spending pattern has remained stable over the past weeks.",
}


def split_windows(records: Sequence[ExpenseRecord], window: int = 7):
    """Returns (prior, recent): the last `window` records and the `window` before them."""
    records = list(records)
    recent = records[-window:]
    prior = records[max(len(records) - 2 * window, 0):len(records) - len(recent)]
    return prior, recent


def percent_change(prior_avg: float, recent_avg: float) -> float:
    return (recent_avg - prior_avg) / prior_avg * 100


def classify_trend(
    records: Sequence[ExpenseRecord],
    window: int = 7,
    threshold_percent: float = 10.0,
) -> TrendResult:
    """
    Compares the mean daily total of the most recent `window` records with
    the `window` records before them.

    Fewer than 2 records, an empty prior window or a zero prior mean all
    come back as 'neutral' rather than a NaN or infinite change.
    """
    if len(records) < 2:
        return TrendResult(trend="neutral", description=INSUFFICIENT_DATA)

    prior, recent = split_windows(records, window)
    recent_avg = daily_average(recent)
    prior_avg = daily_average(prior)
    if not prior or prior_avg == 0:
        return TrendResult(trend="neutral", description=INSUFFICIENT_DATA, recent_average=recent_avg)

    change = percent_change(prior_avg, recent_avg)
    if change > threshold_percent:
        trend = "increasing"
    elif change < -threshold_percent:
        trend = "decreasing"
    else:
        trend = "stable"

    return TrendResult(
        trend=trend,
        description=DESCRIPTIONS[trend],
        recent_average=recent_avg,
        prior_average=prior_avg,
        percent_change=change,
    )
