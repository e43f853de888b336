# expense_tracker/main.py
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional, Tuple

from fastapi import (
    BackgroundTasks,
    Depends,
    FastAPI,
    File,
    HTTPException,
    Request,
    Response,
    UploadFile,
)
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from . import aggregation, daily, insights, processing
from .auth import AuthError, ensure_same_user, get_current_user, verify_session_token
from .config import settings
from .database import init_db, make_engine, make_session_factory
from .date_ranges import RangePreset, resolve_range
from .insights import InsightPolicy
from .schemas import (
    AggregationWindow,
    DashboardStats,
    DayOverview,
    ExpenseIn,
    ExpenseRecord,
    Insight,
    InsightsReport,
    SessionIn,
    TrendResult,
)
from .store import ExpenseStore, StoreError
from .trends import classify_trend

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    engine = make_engine(settings.get_database_url())
    init_db(engine)
    app.state.session_factory = make_session_factory(engine)
    yield
    engine.dispose()
    logger.info("Record store connection closed")


app = FastAPI(
    title="Daily Expense Tracker API",
    description="API for logging daily spending and summarising it into stats, trends and insights.",
    lifespan=lifespan,
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=503, content={"detail": f"Record store unavailable: {exc}"})


# Dependency function for the session factory
def get_session_factory(request: Request):
    yield request.app.state.session_factory

# Dependency function for database session
def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

def get_store(db: Session = Depends(get_db)) -> ExpenseStore:
    return ExpenseStore(db)

def get_policy() -> InsightPolicy:
    return InsightPolicy.from_settings(settings)

def get_date_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    preset: Optional[RangePreset] = None,
) -> Tuple[date, date]:
    try:
        return resolve_range(start_date, end_date, preset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# This is the route for the root URL "/"
@app.get("/")
def read_root():
    return {"message": "Welcome to the Daily Expense Tracker API"}


# --- Session ---

@app.post("/auth/session")
def create_session(body: SessionIn, response: Response):
    """
    Exchanges an id token from the identity provider for a session cookie.
    """
    try:
        user_id = verify_session_token(body.id_token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        body.id_token,
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    logger.info("Session started for %s", user_id)
    return {"user_id": user_id}

@app.delete("/auth/session", status_code=204)
def end_session():
    response = Response(status_code=204)
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response

@app.get("/auth/me")
def who_am_i(user_id: str = Depends(get_current_user)):
    return {"user_id": user_id}


# --- Records ---

@app.get("/expenses", response_model=List[ExpenseRecord])
def list_expenses(
    date_range: Tuple[date, date] = Depends(get_date_range),
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    """
    Returns the user's daily records in a date range, oldest first.
    - **start_date** / **end_date**: bounds (YYYY-MM-DD), default the current month
    - **preset**: this_month, last_month or last_30_days
    """
    return store.fetch_by_user_and_date_range(user_id, *date_range)

@app.get("/expenses/{day}", response_model=ExpenseRecord)
def get_expense(
    day: date,
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    record = store.fetch_by_user_and_date(user_id, day)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No expenses recorded for {day}.")
    return record

@app.put("/expenses/{day}", response_model=ExpenseRecord)
def save_expense(
    day: date,
    expense: ExpenseIn,
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    """
    Creates or overwrites the user's record for a day.
    Amounts left blank count as 0; a supplied total must match their sum.
    """
    ensure_same_user(user_id, expense.user_id)
    return store.upsert_by_user_and_date(user_id, day, expense)

@app.get("/expenses/{day}/overview", response_model=DayOverview)
def get_day_overview(
    day: date,
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    """
    The day's record with the previous day's total, the average over the
    surrounding week and how each category compares to its weekly average.
    """
    return daily.build_overview(
        day,
        store.fetch_by_user_and_date(user_id, day),
        store.fetch_by_user_and_date(user_id, daily.previous_day(day)),
        store.fetch_by_user_and_date_range(user_id, *daily.week_window(day)),
    )

@app.post("/expenses/{day}/copy-previous", response_model=ExpenseRecord)
def copy_previous_day(
    day: date,
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    """Saves the previous day's amounts as this day's record, overwriting it."""
    previous = store.fetch_by_user_and_date(user_id, daily.previous_day(day))
    if previous is None:
        raise HTTPException(status_code=404, detail="No previous day expenses found.")
    return store.upsert_by_user_and_date(user_id, day, daily.copy_of(previous))

@app.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    if not store.delete_by_id(user_id, expense_id):
        raise HTTPException(status_code=404, detail="Expense not found.")
    return Response(status_code=204)


# --- Aggregates ---

@app.get("/summary", response_model=AggregationWindow)
def get_summary(
    date_range: Tuple[date, date] = Depends(get_date_range),
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    """
    Returns totals, per-category totals and counts, the daily average and
    the highest/lowest day for a date range.
    """
    return aggregation.summarize(store.fetch_by_user_and_date_range(user_id, *date_range))

@app.get("/dashboard", response_model=DashboardStats)
def get_dashboard(
    date_range: Tuple[date, date] = Depends(get_date_range),
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
    policy: InsightPolicy = Depends(get_policy),
):
    records = store.fetch_by_user_and_date_range(user_id, *date_range)
    window = aggregation.summarize(records)
    return DashboardStats(
        start_date=date_range[0],
        end_date=date_range[1],
        period_total=window.total,
        daily_average=window.daily_average,
        highest=window.highest,
        lowest=window.lowest,
        most_frequent_category=window.most_frequent_category,
        spending_trend=classify_trend(records, policy.trend_window, policy.trend_threshold_percent),
        category_breakdown=aggregation.category_breakdown(records),
        next_week_estimate=insights.next_week_estimate(records),
    )

@app.get("/trend", response_model=TrendResult)
def get_trend(
    date_range: Tuple[date, date] = Depends(get_date_range),
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
    policy: InsightPolicy = Depends(get_policy),
):
    records = store.fetch_by_user_and_date_range(user_id, *date_range)
    return classify_trend(records, policy.trend_window, policy.trend_threshold_percent)

@app.get("/insights", response_model=List[Insight])
def get_insights(
    date_range: Tuple[date, date] = Depends(get_date_range),
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
    policy: InsightPolicy = Depends(get_policy),
):
    """Category, unusual-day and saving notices for a date range."""
    records = store.fetch_by_user_and_date_range(user_id, *date_range)
    return insights.generate_insights(records, policy)

@app.get("/insights/report", response_model=InsightsReport)
def get_insights_report(
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
    policy: InsightPolicy = Depends(get_policy),
):
    """Long-range report over every record the user has."""
    return insights.build_report(store.fetch_all(user_id), policy)


# --- Import / export ---

@app.post("/upload")
async def upload_csv(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Uploads a CSV of daily expenses and imports it in the background.
    - **file**: CSV with a date column and one column per category
    """
    if not file.filename.endswith('.csv'):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload a CSV.")

    try:
        contents = await file.read()
        processing.validate_csv_format(contents)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Upload of %s failed", file.filename)
        raise HTTPException(status_code=500, detail=f"An error occurred during file processing: {e}")

    background_tasks.add_task(processing.import_csv, contents, user_id, session_factory)
    return {
        "message": f"File '{file.filename}' accepted and is being processed in the background."
    }

@app.get("/export")
def export_csv(
    user_id: str = Depends(get_current_user),
    store: ExpenseStore = Depends(get_store),
):
    content = processing.export_csv(store.fetch_all(user_id))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="expenses.csv"'},
    )
