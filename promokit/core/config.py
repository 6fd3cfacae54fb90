"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Promokit"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "promokit"
    # Standalone dev servers reject multi-document transactions.
    MONGO_USE_TRANSACTIONS: bool = True

    # JWT (tokens are issued by the identity provider)
    JWT_SECRET_KEY: str = "your-super-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"

    # AWS
    AWS_REGION: str = "eu-west-2"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    S3_UPLOADS_BUCKET: str = ""
    S3_ASSETS_BUCKET: str = ""
    JOBS_QUEUE_URL: str = ""

    # Dispatcher
    SQS_MAX_MESSAGES: int = 5
    SQS_WAIT_TIME_SECONDS: int = 20
    WORKER_ERROR_BACKOFF_SECONDS: float = 2.0

    # Scraping
    SCRAPE_TIMEOUT_SECONDS: float = 10.0
    SCRAPE_SECONDARY_TIMEOUT_SECONDS: float = 5.0
    SCRAPE_USER_AGENT: str = "Mozilla/5.0 (compatible; PromokitBot/1.0)"

    # Rendering
    CHROMIUM_PATH: str = ""
    RENDER_TIMEOUT_SECONDS: float = 60.0
    DEFAULT_TEMPLATE_ID: str = "classic"

    # OpenAI (optional; empty key disables generated copy)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_SECONDS: float = 20.0

    # Celery (periodic maintenance only; jobs use JOBS_QUEUE_URL directly)
    CELERY_BROKER_URL: str = "sqs://"
    CELERY_QUEUE_PREFIX: str = "promokit-"
    CELERY_VISIBILITY_TIMEOUT: int = 900
    CELERY_POLLING_INTERVAL: float = 5.0
    CELERY_WAIT_TIME_SECONDS: int = 20
    SQS_DEFAULT_QUEUE_URL: str = ""

    # Reconciliation of jobs stuck at pending
    STALE_PENDING_MINUTES: int = 15
    RECONCILE_BATCH_SIZE: int = 100

    # API
    MAX_REQUEST_BODY_BYTES: int = 1_000_000
    JOBS_MAX_INPUT_BYTES: int = 20_000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
