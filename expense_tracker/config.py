# expense_tracker/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "expenses_db"
    POSTGRES_HOST: str = "localhost" # 'db' inside docker compose
    POSTGRES_PORT: str = "5432"

    # Set DATABASE_URL= (empty) to build a Postgres URL from the parts above
    DATABASE_URL: Optional[str] = "sqlite:///./expenses.db"

    # The identity provider signs id tokens with this shared secret
    SESSION_SECRET: str = "change-me-please-this-is-not-a-real-secret"
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "__session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 5
    # Turn on anywhere the API is served over HTTPS
    SESSION_COOKIE_SECURE: bool = False

    # Insight policy
    UNUSUAL_EXPENSE_MULTIPLIER: float = 1.5
    CONCENTRATION_SHARE: float = 0.40
    CATEGORY_RISE_PERCENT: float = 25.0
    TREND_WINDOW_DAYS: int = 7
    TREND_THRESHOLD_PERCENT: float = 10.0
    TOP_SPENDING_DAYS: int = 5

    UPLOAD_DIR: str = "./shared_data"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")

    def get_database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = Settings()
