"""
Runtime configuration read from environment variables (or a .env file).

settings.py copies these values into Django settings; nothing else
imports this module directly.
"""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingSettings(BaseSettings):
    """Deployment knobs for the billing service"""

    # Outer project directory (where manage.py lives)
    PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Django core
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    DEBUG: bool = False
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "testserver"]

    # SQLite file used when no other database is configured
    DATABASE_PATH: Path = PROJECT_ROOT / "db.sqlite3"

    # Bearer tokens
    JWT_SECRET_KEY: str = "dev-jwt-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Login/register attempts allowed per client address and window
    AUTH_RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT_ATTEMPTS: int = 10
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Calendar days for expiry/overdue checks are taken in this zone
    REFERENCE_TIMEZONE: str = "UTC"
    # Applied to line items submitted without a tax rate
    DEFAULT_TAX_RATE: int = 20

    LOG_LEVEL: str = "INFO"


billing_settings = BillingSettings()
