"""
Backend services for the surgery scheduler.

- EventLogService: append-only notification ledger
- AuthService: bearer-token identity
"""

from .event_log import EventLogService
from .auth_service import AuthService, get_auth_service

__all__ = [
    "EventLogService",
    "AuthService",
    "get_auth_service",
]
