"""
Database connection for the notification ledger (SQLAlchemy).
"""

from .database import Base, init_db, get_db_session, close_db_session

__all__ = [
    "Base",
    "init_db",
    "get_db_session",
    "close_db_session",
]
