# tests/test_config.py
from expense_tracker.config import Settings


def test_database_url_defaults_to_local_sqlite():
    assert Settings.model_fields["DATABASE_URL"].default == "sqlite:///./expenses.db"

def test_explicit_database_url_wins():
    assert Settings(DATABASE_URL="sqlite://").get_database_url() == "sqlite://"

def test_empty_database_url_builds_postgres_url():
    config = Settings(
        DATABASE_URL="",
        POSTGRES_USER="app",
        POSTGRES_PASSWORD="secret",
        POSTGRES_HOST="db",
        POSTGRES_PORT="5433",
        POSTGRES_DB="expenses_db",
    )
    assert config.get_database_url() == "postgresql://app:secret@db:5433/expenses_db"

def test_session_cookie_is_not_secure_unless_enabled():
    assert Settings().SESSION_COOKIE_SECURE is False
    assert Settings(SESSION_COOKIE_SECURE=True).SESSION_COOKIE_SECURE is True
