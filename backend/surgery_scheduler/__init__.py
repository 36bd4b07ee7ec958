"""
Confidential surgery scheduler.

Admission and assignment of surgery slots with sealed patient fields.
"""

__version__ = "0.1.0"
