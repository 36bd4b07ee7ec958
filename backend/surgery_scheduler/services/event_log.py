"""
EventLogService: append-only ledger of scheduler notifications.

Subscribed to the NotificationBus when ENABLE_EVENT_LOG is set.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session as DbSession

from surgery_scheduler.core.notifications import Notification, NotificationBus
from surgery_scheduler.db.database import get_db_session
from surgery_scheduler.models import SchedulerEvent


class EventLogService:
    """
    Append-only notification ledger.

    Events are INSERT-only; nothing here updates or deletes a row.
    """

    # Keys that must never appear in a persisted payload
    SENSITIVE_KEYS = {"patient_id", "surgeon_id", "surgery_type", "schedule_time", "sealed"}

    def __init__(self, db_session: Optional[DbSession] = None):
        self._explicit_db = db_session  # Only set if explicitly passed
        self.logger = logging.getLogger("service.EventLogService")

    @property
    def db(self) -> DbSession:
        if self._explicit_db is not None:
            return self._explicit_db
        return get_db_session()

    def attach(self, bus: NotificationBus) -> None:
        """Subscribe this ledger to every notification on `bus`."""
        bus.subscribe(self.record)

    def record(self, notification: Notification) -> SchedulerEvent:
        data = notification.data or {}
        return self.append_event(
            event_type=notification.event_type,
            slot_id=data.get("slot_id"),
            principal=data.get("patient") or data.get("principal"),
            payload=data,
            occurred_at=notification.occurred_at,
        )

    def append_event(
        self,
        event_type: str,
        slot_id: Optional[int] = None,
        principal: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        occurred_at: Optional[datetime] = None,
    ) -> SchedulerEvent:
        sanitized_payload = self._sanitize_payload(payload) if payload else None

        event = SchedulerEvent(
            event_type=event_type,
            slot_id=slot_id,
            principal=principal,
            payload_json=sanitized_payload,
            occurred_at=_naive_utc(occurred_at or datetime.now(timezone.utc)),
        )
        db = self.db
        db.add(event)
        db.commit()
        db.refresh(event)
        self.logger.debug(f"Ledger append: {event_type} slot={slot_id}")
        return event

    def list_events(
        self, slot_id: Optional[int] = None, event_type: Optional[str] = None
    ) -> List[SchedulerEvent]:
        query = self.db.query(SchedulerEvent)
        if slot_id is not None:
            query = query.filter(SchedulerEvent.slot_id == slot_id)
        if event_type is not None:
            query = query.filter(SchedulerEvent.event_type == event_type)
        return query.order_by(SchedulerEvent.id).all()

    def _sanitize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {}
        for key, value in payload.items():
            if key.lower() in self.SENSITIVE_KEYS:
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_payload(value)
            else:
                sanitized[key] = value
        return sanitized


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
