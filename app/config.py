from typing import ClassVar
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.enums import SummaryStrategy


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./subscriptions.db"
    APP_NAME: str = "SubscriptionControl"
    LOG_LEVEL: str = "INFO"
    LOG_PATH: str | None = None
    LOG_MAX_BYTES: int = 10_000_000
    LOG_BACKUP_COUNT: int = 5
    LOG_INCLUDE_STACKTRACE: bool = False
    SUMMARY_STRATEGY: SummaryStrategy = SummaryStrategy.SQL
    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 100
    MAX_PAGE: int = 1_000_000

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
