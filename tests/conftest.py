# tests/conftest.py
import pytest
import os
import shutil
from datetime import date, datetime, timedelta, timezone

os.environ["PREFECT_TEST_MODE"] = "1"
os.environ["PREFECT_LOGGING_LEVEL"] = "ERROR"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = "./test_shared_data"

import jwt
from fastapi.testclient import TestClient

from expense_tracker.auth import get_current_user
from expense_tracker.config import settings
from expense_tracker.database import Base, init_db, make_engine, make_session_factory
from expense_tracker.main import app, get_session_factory
from expense_tracker.schemas import ExpenseIn, ExpenseRecord
from expense_tracker.store import ExpenseStore

# In-memory SQLite by default; point at a throwaway Postgres to test against it
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

USER_ID = "user-123"


def make_record(day, user_id=USER_ID, **amounts) -> ExpenseRecord:
    """Builds a record the way the API would, so total always matches the amounts."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    expense = ExpenseIn(**amounts)
    return ExpenseRecord(
        id=f"{user_id}_{day.isoformat()}",
        user_id=user_id,
        date=day,
        total=expense.total,
        **{category.value: value for category, value in expense.amounts().items()},
    )


def make_days(totals, start="2024-01-01", category="lunch"):
    """One record per consecutive day, spending each total on a single category."""
    first = date.fromisoformat(start)
    return [make_record(first + timedelta(days=i), **{category: t}) for i, t in enumerate(totals)]


def make_token(user_id=USER_ID, expires_in=3600, secret=None):
    claims = {"sub": user_id, "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in)}
    return jwt.encode(claims, secret or settings.SESSION_SECRET, algorithm=settings.SESSION_ALGORITHM)


@pytest.fixture(scope="function")
def test_engine():
    engine = make_engine(TEST_DATABASE_URL)
    # Create tables (INCLUDING INDEXES from models.py)
    init_db(engine)
    yield engine
    # Drop tables to clean up
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(test_engine):
    return make_session_factory(test_engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    """
    Creates a fresh database session for a single test.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def anon_client(session_factory):
    """
    A client without a signed-in user; the session cookie gate is real.
    """
    def get_test_session_factory_override():
        yield session_factory

    app.dependency_overrides[get_session_factory] = get_test_session_factory_override

    # TestClient runs background tasks SYNCHRONOUSLY, which is great for testing.
    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def client(anon_client):
    """
    A client signed in as USER_ID.
    """
    app.dependency_overrides[get_current_user] = lambda: USER_ID
    yield anon_client

@pytest.fixture(scope="function")
def seed_db_data(client, session_factory):
    """
    Saves a fortnight of expenses for USER_ID through the API, plus one day
    for another user straight into the store.
    First week: 100/day. Second week: 157/day.
    """
    for i in range(14):
        day = date(2024, 1, 1) + timedelta(days=i)
        lunch = 50 if i < 7 else 80
        dinner = 50 if i < 7 else 77
        response = client.put(f"/expenses/{day.isoformat()}", json={"lunch": lunch, "dinner": dinner})
        assert response.status_code == 200

    db = session_factory()
    try:
        ExpenseStore(db).upsert_by_user_and_date("someone-else", date(2024, 1, 3), ExpenseIn(lunch=999))
    finally:
        db.close()

@pytest.fixture(scope="session", autouse=True)
def cleanup_test_uploads():
    yield
    # Runs after all tests are done
    if os.path.exists("./test_shared_data"):
        shutil.rmtree("./test_shared_data")
