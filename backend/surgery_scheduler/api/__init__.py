"""
API Routes for the surgery scheduler.

- scheduler.py: slot, request and assignment endpoints
"""

from .scheduler import bp as scheduler_bp

__all__ = ["scheduler_bp"]
