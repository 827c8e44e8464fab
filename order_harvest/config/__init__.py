"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Order service
    # ======================
    ORDER_API_BASE_URL: str = "https://api.example.com"
    ORDER_API_USER_ID: str = "6"
    ORDER_API_ID_TOKEN: str = ""
    ORDER_API_REFRESH_TOKEN: str = ""
    ORDER_PAGE_SIZE: int = 75

    # ======================
    # Fetch orchestration
    # ======================
    FETCH_CONCURRENCY: int = 5
    FETCH_RETRIES: int = 3
    FETCH_INITIAL_DELAY_MS: int = 1000
    FETCH_TIMEOUT_SECONDS: float = 30.0
    DAILY_SEGMENT_MAX_DAYS: int = 7

    # ======================
    # Presentation
    # ======================
    DISPLAY_TIMEZONE: Optional[str] = None
    EXPORT_FILENAME: str = "orders_data.tsv"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
