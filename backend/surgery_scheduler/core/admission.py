"""
Admission control for appointment requests against the current slot.
"""

import logging
from datetime import datetime

from .access import AccessRegistry
from .errors import CapacityExceeded, DuplicateRequest, ValidationError, WindowViolation
from .notifications import EventType, Notification, NotificationBus
from .principal import Principal, CORE_PRINCIPAL
from .sealing import SealedValueProvider
from .slots import Request, SlotLifecycle
from .time_window import TimeWindowPolicy


MIN_URGENCY = 1
MAX_URGENCY = 10
MIN_SURGERY_TYPE = 1
MAX_SURGERY_TYPE = 20
PATIENT_ID_WIDTH = 32


def _in_range(value, low: int, high: int) -> bool:
    return not isinstance(value, bool) and isinstance(value, int) and low <= value <= high


class AdmissionController:
    """
    Validates and records patient requests.

    Checks run in a fixed order (role, window, field ranges, duplicate,
    capacity) and any failure leaves every table untouched.
    """

    def __init__(
        self,
        lifecycle: SlotLifecycle,
        registry: AccessRegistry,
        policy: TimeWindowPolicy,
        provider: SealedValueProvider,
        bus: NotificationBus,
    ):
        self.lifecycle = lifecycle
        self.registry = registry
        self.policy = policy
        self.provider = provider
        self.bus = bus
        self.logger = logging.getLogger("service.AdmissionController")

    def request_appointment(
        self,
        caller: Principal,
        patient_id: int,
        urgency: int,
        surgery_type: int,
        now: datetime,
    ) -> Request:
        self.registry.require_patient(caller)

        slot = self.lifecycle.current_slot()
        if not self.policy.requests_open(slot, now):
            raise WindowViolation("Requests not open")
        if not _in_range(urgency, MIN_URGENCY, MAX_URGENCY):
            raise ValidationError("Urgency level must be between 1-10")
        if not _in_range(surgery_type, MIN_SURGERY_TYPE, MAX_SURGERY_TYPE):
            raise ValidationError("Invalid surgery type")
        if not _in_range(patient_id, 0, (1 << PATIENT_ID_WIDTH) - 1):
            raise ValidationError("Invalid patient id")
        if self.lifecycle.get_request(slot.id, caller) is not None:
            raise DuplicateRequest("Already requested for this slot")
        if slot.is_full:
            raise CapacityExceeded("Slot capacity reached")

        sealed_urgency = self.provider.seal(urgency, 8)
        sealed_patient_id = self.provider.seal(patient_id, PATIENT_ID_WIDTH)
        sealed_surgery_type = self.provider.seal(surgery_type, 8)
        for sealed in (sealed_urgency, sealed_patient_id, sealed_surgery_type):
            self.provider.grant_read(sealed, CORE_PRINCIPAL)
            self.provider.grant_read(sealed, caller)

        request = Request(
            slot_id=slot.id,
            principal=caller,
            sealed_urgency=sealed_urgency,
            sealed_patient_id=sealed_patient_id,
            sealed_surgery_type=sealed_surgery_type,
            submitted_at=now,
        )
        self.lifecycle.record_request(slot, request)

        self.logger.info(f"Request recorded for slot {slot.id} ({slot.bookings}/{slot.max_capacity})")
        self.bus.publish(Notification(
            EventType.APPOINTMENT_REQUESTED,
            {"patient": str(caller), "slot_id": slot.id, "timestamp": now.isoformat()},
            occurred_at=now,
        ))
        return request
