"""
SQLAlchemy connection for the notification ledger.

The scheduling core keeps its state in memory; only the notification
ledger is persisted here.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base

from surgery_scheduler.config import config

# SQLAlchemy base for model declarations
Base = declarative_base()

# Engine and session factory (initialized lazily)
_engine = None
_session_factory = None


def get_engine():
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            config.get_database_url(),
            echo=config.DEBUG,  # Log SQL in debug mode
            pool_pre_ping=True,
        )
    return _engine


def get_db_session():
    """Get a scoped database session.

    Returns the thread-local session from the scoped session factory.
    The session is cleaned up at the end of each request via close_db_session().
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = scoped_session(
            sessionmaker(bind=get_engine(), autocommit=False, autoflush=False)
        )
    return _session_factory()


def init_db():
    """Create ledger tables (for development/testing)."""
    # Import models so they register with Base.metadata
    from surgery_scheduler import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def close_db_session(exception=None):
    """Remove the current session (call at end of request)."""
    if _session_factory is not None:
        if exception is not None:
            _session_factory.rollback()
        _session_factory.remove()
