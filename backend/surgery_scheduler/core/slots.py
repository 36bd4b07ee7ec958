"""
Slot lifecycle state machine.

Per slot id: Uncreated -> Open -> Closed. Closed is terminal; the current
pointer then moves to a fresh, uncreated id. Exactly one slot id is
"current" at any time and ids are never reused.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .access import AccessRegistry
from .errors import NotFound, StateConflict, ValidationError, WindowViolation
from .notifications import EventType, Notification, NotificationBus
from .principal import Principal, CORE_PRINCIPAL
from .sealing import SealedValue, SealedValueProvider
from .time_window import TimeWindowPolicy


FIRST_SLOT_ID = 1
MAX_SLOT_ID = 0xFFFF
MIN_CAPACITY = 1
MAX_CAPACITY = 10
SURGEON_ID_WIDTH = 16
SCHEDULE_TIME_WIDTH = 32


class SlotState(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Slot:
    """
    A schedulable unit.

    id, max_capacity and created_at never change once the slot exists.
    """

    id: int
    max_capacity: int
    created_at: datetime
    sealed_surgeon_id: SealedValue
    sealed_schedule_time: SealedValue
    state: SlotState = SlotState.OPEN
    assigned: bool = False
    assigned_principal: Optional[Principal] = None
    revealed_urgency: Optional[int] = None
    assigned_at: Optional[datetime] = None
    requesters: List[Principal] = field(default_factory=list)
    bookings: int = 0

    @property
    def is_open(self) -> bool:
        return self.state == SlotState.OPEN and not self.assigned

    @property
    def is_full(self) -> bool:
        return self.bookings >= self.max_capacity

    def add_requester(self, principal: Principal) -> None:
        self.requesters.append(principal)
        self.bookings += 1

    def close(self) -> None:
        self.state = SlotState.CLOSED

    def mark_assigned(self, principal: Principal, urgency: int, now: datetime) -> None:
        self.state = SlotState.CLOSED
        self.assigned = True
        self.assigned_principal = principal
        self.revealed_urgency = urgency
        self.assigned_at = now

    def to_summary(self) -> Dict[str, Any]:
        return {
            "slot_id": self.id,
            "slot_generated": True,
            "state": self.state.value,
            "slot_assigned": self.assigned,
            "created_at": self.created_at.isoformat(),
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
            "request_count": len(self.requesters),
            "max_capacity": self.max_capacity,
            "bookings": self.bookings,
        }


@dataclass(frozen=True)
class Request:
    """A patient's sealed submission against one slot. Never updated."""

    slot_id: int
    principal: Principal
    sealed_urgency: SealedValue
    sealed_patient_id: SealedValue
    sealed_surgery_type: SealedValue
    submitted_at: datetime
    submitted: bool = True

    def sealed_field(self, name: str) -> SealedValue:
        fields = {
            "urgency": self.sealed_urgency,
            "patient_id": self.sealed_patient_id,
            "surgery_type": self.sealed_surgery_type,
        }
        if name not in fields:
            raise NotFound(f"Unknown request field: {name}")
        return fields[name]


def _uncreated_summary(slot_id: int) -> Dict[str, Any]:
    return {
        "slot_id": slot_id,
        "slot_generated": False,
        "state": "uncreated",
        "slot_assigned": False,
        "created_at": None,
        "assigned_at": None,
        "request_count": 0,
        "max_capacity": 0,
        "bookings": 0,
    }


def _check_width(value: int, width: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < (1 << width):
        raise ValidationError(f"Invalid {label}")


class SlotLifecycle:
    """
    Owns the slot table, the request table and the current-id counter.

    Admission, selection and the emergency override mutate slots only
    through the helpers here.
    """

    def __init__(
        self,
        registry: AccessRegistry,
        policy: TimeWindowPolicy,
        provider: SealedValueProvider,
        bus: NotificationBus,
    ):
        self.registry = registry
        self.policy = policy
        self.provider = provider
        self.bus = bus
        self.current_id = FIRST_SLOT_ID
        self.slots: Dict[int, Slot] = {}
        self.requests: Dict[Tuple[int, Principal], Request] = {}
        self.logger = logging.getLogger("service.SlotLifecycle")

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def current_slot(self) -> Optional[Slot]:
        return self.slots.get(self.current_id)

    def get_slot(self, slot_id: int) -> Slot:
        slot = self.slots.get(slot_id)
        if slot is None:
            raise NotFound(f"Slot {slot_id} not found")
        return slot

    def get_request(self, slot_id: int, principal: Principal) -> Optional[Request]:
        return self.requests.get((slot_id, principal))

    def open_slots(self) -> List[Slot]:
        return [slot for slot in self.slots.values() if slot.is_open]

    def current_summary(self) -> Dict[str, Any]:
        slot = self.current_slot()
        if slot is None:
            return _uncreated_summary(self.current_id)
        return slot.to_summary()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def create_slot(
        self,
        caller: Principal,
        surgeon_id: int,
        schedule_time: int,
        max_capacity: int,
        now: datetime,
    ) -> Slot:
        """Open a new current slot; all checks run before anything is sealed."""
        self.registry.require_surgeon(caller)
        if not self.policy.business_hour(now):
            raise WindowViolation("Outside business hours")

        current = self.current_slot()
        if current is not None and current.is_open:
            raise StateConflict("Slot already active")
        # A current slot closed by emergency assignment keeps its id
        slot_id = self.current_id + 1 if current is not None else self.current_id
        if slot_id > MAX_SLOT_ID:
            raise StateConflict("Slot id space exhausted")

        if isinstance(max_capacity, bool) or not isinstance(max_capacity, int) \
                or not MIN_CAPACITY <= max_capacity <= MAX_CAPACITY:
            raise ValidationError("Invalid capacity")
        _check_width(surgeon_id, SURGEON_ID_WIDTH, "surgeon id")
        _check_width(schedule_time, SCHEDULE_TIME_WIDTH, "schedule time")

        sealed_surgeon = self.provider.seal(surgeon_id, SURGEON_ID_WIDTH)
        sealed_time = self.provider.seal(schedule_time, SCHEDULE_TIME_WIDTH)
        for sealed in (sealed_surgeon, sealed_time):
            self.provider.grant_read(sealed, CORE_PRINCIPAL)
            self.provider.grant_read(sealed, caller)

        slot = Slot(
            id=slot_id,
            max_capacity=max_capacity,
            created_at=now,
            sealed_surgeon_id=sealed_surgeon,
            sealed_schedule_time=sealed_time,
        )
        self.current_id = slot_id
        self.slots[slot_id] = slot

        self.logger.info(f"Slot {slot_id} opened by {caller} (capacity={max_capacity})")
        self.bus.publish(Notification(
            EventType.SLOT_CREATED,
            {"slot_id": slot_id, "created_at": now.isoformat()},
            occurred_at=now,
        ))
        return slot

    def record_request(self, slot: Slot, request: Request) -> None:
        self.requests[(slot.id, request.principal)] = request
        slot.add_requester(request.principal)

    def advance(self) -> int:
        """Move the current pointer to the next, uncreated id."""
        self.current_id += 1
        return self.current_id
