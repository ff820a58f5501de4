"""Application configuration via Pydantic Settings."""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./wishlist.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Scraping
    SCRAPE_TIMEOUT_SECONDS: float = 15.0
    SCRAPE_MAX_REDIRECTS: int = 5
    SCRAPE_RETRY_ATTEMPTS: int = 2
    BROWSER_HEADLESS: bool = True

    # Price checks
    PRICE_CHECK_INTERVAL_HOURS: int = 12
    PRICE_CHECK_ITEM_DELAY_SECONDS: float = 1.0

    # Email notifications (disabled unless host, user and password are set)
    EMAIL_HOST: str = ""
    EMAIL_PORT: int = 587
    EMAIL_SECURE: bool = False  # True = implicit TLS (port 465), False = STARTTLS
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    EMAIL_FROM: str = ""
    NOTIFICATION_EMAIL: str = ""

    @property
    def email_enabled(self) -> bool:
        """Whether enough SMTP settings are present to send email."""
        return bool(self.EMAIL_HOST and self.EMAIL_USER and self.EMAIL_PASS)

    def get_notification_recipient(self) -> Optional[str]:
        """Resolve the address price alerts are sent to.

        Returns:
            NOTIFICATION_EMAIL, falling back to the SMTP user, or None
        """
        return self.NOTIFICATION_EMAIL or self.EMAIL_USER or None


settings = Settings()
