"""
Application settings for the donation bridge.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Shared secret expected in the X-API-Key header
    API_SECRET: str = "change-me"

    # Storage: "memory" (bounded) or "sql" (persisted)
    STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite:///./data/donations.db"

    # Queue policy
    MAX_STORED_DONATIONS: int = 100
    CLEANUP_KEEP: int = 1000
    LATEST_DEFAULT_LIMIT: int = 10
    LATEST_MAX_LIMIT: int = 100

    # Shown when the webhook omits the donor name
    DEFAULT_DONOR_NAME: str = "Anonim"

    # Environment
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "./data"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
