"""
AssignmentSelector - picks the winning request for the current slot.

Runs only in an assignment hour. Scans requesters in insertion order and
replaces the running best only on a strictly greater urgency, so ties go
to the earliest requester. Comparison goes through an UrgencyComparator,
which keeps plaintext out of this module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import StateConflict, WindowViolation
from .notifications import (
    EventType,
    Notification,
    NotificationBus,
    REASON_NO_CANDIDATE,
    REASON_NO_REQUESTS,
)
from .principal import Principal
from .sealing import UrgencyComparator
from .slots import Request, SlotLifecycle
from .time_window import TimeWindowPolicy


@dataclass
class SelectionResult:
    """Outcome of one assignment run."""

    slot_id: int
    assigned: bool
    principal: Optional[Principal] = None
    urgency: Optional[int] = None
    reason: str = ""
    next_slot_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot_id": self.slot_id,
            "assigned": self.assigned,
            "patient": str(self.principal) if self.principal else None,
            "urgency": self.urgency,
            "reason": self.reason,
            "next_slot_id": self.next_slot_id,
        }


class AssignmentSelector:
    """
    Closes the current slot with either an assignee or a no-assignment reason.

    The current id always advances on a successful run, whatever the outcome.
    """

    def __init__(
        self,
        lifecycle: SlotLifecycle,
        policy: TimeWindowPolicy,
        comparator: UrgencyComparator,
        bus: NotificationBus,
    ):
        self.lifecycle = lifecycle
        self.policy = policy
        self.comparator = comparator
        self.bus = bus
        self.logger = logging.getLogger("agent.AssignmentSelector")

    def process_assignments(self, caller: Principal, now: datetime) -> SelectionResult:
        slot = self.lifecycle.current_slot()
        if slot is None:
            raise StateConflict("Slot not generated")
        if not slot.is_open:
            raise StateConflict("Slot already assigned")
        if not self.policy.assignment_open(slot, now):
            raise WindowViolation("Not an assignment hour")

        if not slot.requesters:
            slot.close()
            next_id = self.lifecycle.advance()
            self.logger.info(f"Slot {slot.id} closed without requests (run by {caller})")
            self._publish_no_assignment(slot.id, REASON_NO_REQUESTS, now)
            return SelectionResult(slot.id, False, reason=REASON_NO_REQUESTS, next_slot_id=next_id)

        winner = self._select(slot.id, slot.requesters)
        if winner is None:
            slot.close()
            next_id = self.lifecycle.advance()
            self.logger.warning(f"Slot {slot.id} closed, no candidate among {len(slot.requesters)}")
            self._publish_no_assignment(slot.id, REASON_NO_CANDIDATE, now)
            return SelectionResult(slot.id, False, reason=REASON_NO_CANDIDATE, next_slot_id=next_id)

        urgency = self.comparator.disclose(winner.sealed_urgency)
        slot.mark_assigned(winner.principal, urgency, now)
        next_id = self.lifecycle.advance()

        self.logger.info(f"Slot {slot.id} assigned (urgency={urgency}, run by {caller})")
        self.bus.publish(Notification(
            EventType.SLOT_ASSIGNED,
            {"slot_id": slot.id, "patient": str(winner.principal), "urgency": urgency},
            occurred_at=now,
        ))
        return SelectionResult(
            slot.id,
            True,
            principal=winner.principal,
            urgency=urgency,
            reason="highest urgency",
            next_slot_id=next_id,
        )

    def _select(self, slot_id: int, requesters) -> Optional[Request]:
        best: Optional[Request] = None
        for principal in requesters:
            request = self.lifecycle.get_request(slot_id, principal)
            if request is None or not request.submitted:
                continue
            if best is None or self.comparator.greater(request.sealed_urgency, best.sealed_urgency):
                best = request
        return best

    def _publish_no_assignment(self, slot_id: int, reason: str, now: datetime) -> None:
        self.bus.publish(Notification(
            EventType.NO_ASSIGNMENT,
            {"slot_id": slot_id, "reason": reason},
            occurred_at=now,
        ))
