"""
Outbound notifications.

Published once per successful state transition, after the mutation has
completed. Observers are fire-and-forget and never steer control flow.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List


class EventType:
    """Notification event types."""
    SLOT_CREATED = "SlotCreated"
    APPOINTMENT_REQUESTED = "AppointmentRequested"
    SLOT_ASSIGNED = "SlotAssigned"
    NO_ASSIGNMENT = "NoAssignment"
    SURGEON_AUTHORIZED = "SurgeonAuthorized"
    PATIENT_AUTHORIZED = "PatientAuthorized"


# NoAssignment reasons
REASON_NO_REQUESTS = "no requests received"
REASON_NO_CANDIDATE = "no suitable candidate found"


@dataclass
class Notification:
    event_type: str
    data: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "data": self.data,
            "occurred_at": self.occurred_at.isoformat(),
        }


Subscriber = Callable[[Notification], None]


class NotificationBus:
    """Synchronous subscriber list."""

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self.logger = logging.getLogger("service.NotificationBus")

    def subscribe(self, subscriber: Subscriber) -> Subscriber:
        self._subscribers.append(subscriber)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def publish(self, notification: Notification) -> Notification:
        self.logger.info(f"{notification.event_type}: {notification.data}")
        for subscriber in list(self._subscribers):
            try:
                subscriber(notification)
            except Exception:
                # A failing observer must not undo a committed transition
                self.logger.exception(f"Subscriber failed on {notification.event_type}")
        return notification


class NotificationRecorder:
    """Subscriber that keeps every notification in memory."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_type(self, event_type: str) -> List[Notification]:
        return [n for n in self.notifications if n.event_type == event_type]

    def last(self) -> Notification:
        return self.notifications[-1]

    def clear(self) -> None:
        self.notifications.clear()
