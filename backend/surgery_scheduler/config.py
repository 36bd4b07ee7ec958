"""
Application configuration loaded from environment variables.

Time-window policy, sealing key, identity tokens and the notification
ledger database are all configured here.
"""

import os
from pathlib import Path
from typing import Tuple
from dotenv import load_dotenv

# Load .env file from backend directory
backend_dir = Path(__file__).parent.parent
load_dotenv(backend_dir / ".env")


def _parse_hours(raw: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


class Config:
    """Application configuration."""

    # Flask settings
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Notification ledger
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///surgery_scheduler.db")
    ENABLE_EVENT_LOG = os.getenv("ENABLE_EVENT_LOG", "false").lower() == "true"

    # Roles
    ADMIN_PRINCIPAL = os.getenv("ADMIN_PRINCIPAL", "hospital-admin")

    # Identity tokens
    JWT_SECRET = os.getenv("JWT_SECRET", "surgery-scheduler-secret-change-in-production")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Sealed value provider
    SEALING_KEY = os.getenv("SEALING_KEY", "surgery-scheduler-sealing-key")

    # Time windows (hour-of-day, after UTC offset)
    UTC_OFFSET_HOURS = int(os.getenv("UTC_OFFSET_HOURS", "0"))
    BUSINESS_HOURS_START = int(os.getenv("BUSINESS_HOURS_START", "8"))
    BUSINESS_HOURS_END = int(os.getenv("BUSINESS_HOURS_END", "18"))
    ASSIGNMENT_HOURS = _parse_hours(os.getenv("ASSIGNMENT_HOURS", "9,13,17"))

    @classmethod
    def get_database_url(cls) -> str:
        """Notification ledger connection URL."""
        return cls.DATABASE_URL


# Singleton instance
config = Config()
