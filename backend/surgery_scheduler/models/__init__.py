"""
SQLAlchemy models for the surgery scheduler.
"""

from .event_log import SchedulerEvent

__all__ = ["SchedulerEvent"]
