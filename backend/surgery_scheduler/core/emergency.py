"""
Admin-only emergency assignment that bypasses selection.
"""

import logging
from datetime import datetime

from .access import AccessRegistry
from .errors import NotFound, StateConflict
from .notifications import EventType, Notification, NotificationBus
from .principal import Principal
from .slots import Slot, SlotLifecycle


# Recorded in place of a revealed urgency; not a patient-submitted value
EMERGENCY_URGENCY = 10


class EmergencyOverride:
    """
    Assigns a slot directly to a patient who requested it.

    Ignores the assignment-hour window and leaves the current id alone.
    """

    def __init__(self, lifecycle: SlotLifecycle, registry: AccessRegistry, bus: NotificationBus):
        self.lifecycle = lifecycle
        self.registry = registry
        self.bus = bus
        self.logger = logging.getLogger("service.EmergencyOverride")

    def emergency_assign(
        self, caller: Principal, slot_id: int, patient: Principal, now: datetime
    ) -> Slot:
        self.registry.require_admin(caller)

        slot = self.lifecycle.slots.get(slot_id)
        if slot is None:
            raise StateConflict("Slot not generated")
        if not slot.is_open:
            raise StateConflict("Slot already assigned")
        if self.lifecycle.get_request(slot_id, patient) is None:
            raise NotFound("Patient did not request this slot")

        slot.mark_assigned(patient, EMERGENCY_URGENCY, now)

        self.logger.warning(f"Emergency assignment of slot {slot_id} to {patient}")
        self.bus.publish(Notification(
            EventType.SLOT_ASSIGNED,
            {"slot_id": slot_id, "patient": str(patient), "urgency": EMERGENCY_URGENCY},
            occurred_at=now,
        ))
        return slot
