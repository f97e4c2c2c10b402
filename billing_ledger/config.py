"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Billing Ledger Import Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./billing_ledger.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "console" if ENVIRONMENT == "development" else "json",
    )

    # Ledger import
    IMPORT_PREVIEW_MAX_ROWS: int = int(os.getenv("IMPORT_PREVIEW_MAX_ROWS", "500"))
    IMPORT_MAX_UPLOAD_BYTES: int = int(
        os.getenv("IMPORT_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))
    )
    IMPORT_MAX_APPLY_ROWS: int = int(os.getenv("IMPORT_MAX_APPLY_ROWS", "10000"))


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
