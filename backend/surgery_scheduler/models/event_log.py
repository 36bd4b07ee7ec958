"""
Scheduler event model: append-only ledger of outbound notifications.

Payloads carry principals, slot ids and revealed urgency only; sealed
patient fields never reach this table.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, JSON

from surgery_scheduler.db.database import Base


class SchedulerEvent(Base):
    """One notification emitted by the scheduling core."""

    __tablename__ = "scheduler_event"

    id = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    event_id = Column(String(32), unique=True, nullable=False, default=lambda: uuid.uuid4().hex)
    event_type = Column(String(100), nullable=False)  # SlotCreated, SlotAssigned, etc.

    # Optional references
    slot_id = Column(Integer, nullable=True, index=True)
    principal = Column(String(255), nullable=True)

    payload_json = Column(JSON, nullable=True)

    # Timestamps
    occurred_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "slot_id": self.slot_id,
            "principal": self.principal,
            "payload": self.payload_json,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
        }
