"""
Scheduling core.

Usage:
    from surgery_scheduler.core import SurgeryScheduler, Principal

    scheduler = SurgeryScheduler(admin=Principal("admin"))
"""

from .errors import (
    SchedulerError,
    AuthorizationError,
    WindowViolation,
    StateConflict,
    ValidationError,
    CapacityExceeded,
    DuplicateRequest,
    NotFound,
)
from .principal import Principal, CORE_PRINCIPAL
from .clock import SystemClock, ManualClock
from .sealing import (
    SealedValue,
    SealedValueProvider,
    InMemorySealedValueProvider,
    UrgencyComparator,
    RevealingComparator,
)
from .notifications import (
    EventType,
    Notification,
    NotificationBus,
    NotificationRecorder,
    REASON_NO_REQUESTS,
    REASON_NO_CANDIDATE,
)
from .access import AccessRegistry
from .time_window import TimeWindowPolicy
from .slots import Slot, SlotState, Request, SlotLifecycle
from .admission import AdmissionController
from .selection import AssignmentSelector, SelectionResult
from .emergency import EmergencyOverride, EMERGENCY_URGENCY
from .scheduler import SurgeryScheduler

__all__ = [
    # Errors
    "SchedulerError",
    "AuthorizationError",
    "WindowViolation",
    "StateConflict",
    "ValidationError",
    "CapacityExceeded",
    "DuplicateRequest",
    "NotFound",
    # Identity and time
    "Principal",
    "CORE_PRINCIPAL",
    "SystemClock",
    "ManualClock",
    # Sealing
    "SealedValue",
    "SealedValueProvider",
    "InMemorySealedValueProvider",
    "UrgencyComparator",
    "RevealingComparator",
    # Notifications
    "EventType",
    "Notification",
    "NotificationBus",
    "NotificationRecorder",
    "REASON_NO_REQUESTS",
    "REASON_NO_CANDIDATE",
    # Components
    "AccessRegistry",
    "TimeWindowPolicy",
    "Slot",
    "SlotState",
    "Request",
    "SlotLifecycle",
    "AdmissionController",
    "AssignmentSelector",
    "SelectionResult",
    "EmergencyOverride",
    "EMERGENCY_URGENCY",
    "SurgeryScheduler",
]
