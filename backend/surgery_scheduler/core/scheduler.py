"""
SurgeryScheduler: the serialized entry point to the scheduling core.

Owns the aggregate (access registry, slot table, request table, current
id) and a single re-entrant lock. Every mutating call holds the lock for
its whole duration, so callers on different threads observe operations
one at a time and never see partial effects.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .access import AccessRegistry
from .admission import AdmissionController
from .clock import SystemClock
from .emergency import EmergencyOverride
from .errors import NotFound, SchedulerError
from .notifications import EventType, Notification, NotificationBus
from .principal import Principal
from .sealing import (
    InMemorySealedValueProvider,
    RevealingComparator,
    SealedValueProvider,
    UrgencyComparator,
)
from .selection import AssignmentSelector, SelectionResult
from .slots import Request, Slot, SlotLifecycle
from .time_window import TimeWindowPolicy

T = TypeVar("T")
Clock = Callable[[], datetime]


class SurgeryScheduler:
    """
    Facade over the scheduling components.

    Usage:
        scheduler = SurgeryScheduler(admin=Principal("admin"), clock=ManualClock())
        scheduler.authorize_surgeon(admin, surgeon)
        scheduler.create_slot(surgeon, surgeon_id=1, schedule_time=1700000000, max_capacity=2)
    """

    def __init__(
        self,
        admin: Principal,
        clock: Optional[Clock] = None,
        policy: Optional[TimeWindowPolicy] = None,
        provider: Optional[SealedValueProvider] = None,
        comparator: Optional[UrgencyComparator] = None,
        bus: Optional[NotificationBus] = None,
        sealing_key: str = "surgery-scheduler-sealing-key",
    ):
        self.clock = clock or SystemClock()
        self.policy = policy or TimeWindowPolicy()
        self.provider = provider or InMemorySealedValueProvider(key=sealing_key)
        self.comparator = comparator or RevealingComparator(self.provider)
        self.bus = bus or NotificationBus()

        self.registry = AccessRegistry(admin)
        self.lifecycle = SlotLifecycle(self.registry, self.policy, self.provider, self.bus)
        self.admission = AdmissionController(
            self.lifecycle, self.registry, self.policy, self.provider, self.bus
        )
        self.selector = AssignmentSelector(self.lifecycle, self.policy, self.comparator, self.bus)
        self.emergency = EmergencyOverride(self.lifecycle, self.registry, self.bus)

        self._lock = threading.RLock()
        self.logger = logging.getLogger("service.SurgeryScheduler")

    @classmethod
    def from_config(cls, config, **kwargs) -> "SurgeryScheduler":
        """Build a scheduler from the application Config."""
        kwargs.setdefault("policy", TimeWindowPolicy.from_config(config))
        kwargs.setdefault("sealing_key", config.SEALING_KEY)
        return cls(admin=Principal(config.ADMIN_PRINCIPAL), **kwargs)

    # -------------------------------------------------------------------------
    # Mutating operations
    # -------------------------------------------------------------------------

    def authorize_surgeon(self, caller: Principal, target: Principal) -> None:
        def run():
            self.registry.authorize_surgeon(caller, target)
            self.bus.publish(Notification(
                EventType.SURGEON_AUTHORIZED, {"principal": str(target)}, occurred_at=self.clock()
            ))
        self._serialized("authorize_surgeon", run)

    def authorize_patient(self, caller: Principal, target: Principal) -> None:
        def run():
            self.registry.authorize_patient(caller, target)
            self.bus.publish(Notification(
                EventType.PATIENT_AUTHORIZED, {"principal": str(target)}, occurred_at=self.clock()
            ))
        self._serialized("authorize_patient", run)

    def create_slot(
        self, caller: Principal, surgeon_id: int, schedule_time: int, max_capacity: int
    ) -> Slot:
        return self._serialized(
            "create_slot",
            lambda: self.lifecycle.create_slot(
                caller, surgeon_id, schedule_time, max_capacity, self.clock()
            ),
        )

    def request_appointment(
        self, caller: Principal, patient_id: int, urgency: int, surgery_type: int
    ) -> Request:
        return self._serialized(
            "request_appointment",
            lambda: self.admission.request_appointment(
                caller, patient_id, urgency, surgery_type, self.clock()
            ),
        )

    def process_assignments(
        self, caller: Principal, now: Optional[datetime] = None
    ) -> SelectionResult:
        return self._serialized(
            "process_assignments",
            lambda: self.selector.process_assignments(caller, now or self.clock()),
        )

    def emergency_assign(self, caller: Principal, slot_id: int, patient: Principal) -> Slot:
        return self._serialized(
            "emergency_assign",
            lambda: self.emergency.emergency_assign(caller, slot_id, patient, self.clock()),
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def admin(self) -> Principal:
        return self.registry.admin

    @property
    def current_id(self) -> int:
        return self.lifecycle.current_id

    def is_surgeon(self, principal: Principal) -> bool:
        return self.registry.is_surgeon(principal)

    def is_patient(self, principal: Principal) -> bool:
        return self.registry.is_patient(principal)

    def current_slot_info(self) -> Dict[str, Any]:
        with self._lock:
            return self.lifecycle.current_summary()

    def patient_request_status(self, principal: Principal) -> Dict[str, Any]:
        """Whether `principal` has a request against the current slot."""
        with self._lock:
            request = self.lifecycle.get_request(self.lifecycle.current_id, principal)
            return {
                "slot_id": self.lifecycle.current_id,
                "has_requested": request is not None,
                "request_timestamp": request.submitted_at.isoformat() if request else None,
            }

    def slot_history(self, slot_id: int) -> Dict[str, Any]:
        with self._lock:
            slot = self.lifecycle.get_slot(slot_id)
            summary = slot.to_summary()
            summary["assigned_patient"] = (
                str(slot.assigned_principal) if slot.assigned_principal else None
            )
            summary["revealed_urgency"] = slot.revealed_urgency
            return summary

    def current_hour(self) -> int:
        return self.policy.hour_of_day(self.clock())

    def requesting_patients(self, caller: Principal, slot_id: int) -> List[Principal]:
        with self._lock:
            self.registry.require_admin(caller)
            return list(self.lifecycle.get_slot(slot_id).requesters)

    def reveal_request_field(self, caller: Principal, slot_id: int, field: str) -> int:
        """Reveal one of the caller's own sealed request fields."""
        with self._lock:
            request = self.lifecycle.get_request(slot_id, caller)
            if request is None:
                raise NotFound("No request for this slot")
            return self.provider.reveal(request.sealed_field(field), caller)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _serialized(self, operation: str, fn: Callable[[], T]) -> T:
        with self._lock:
            try:
                return fn()
            except SchedulerError as e:
                self.logger.warning(f"{operation} rejected: {type(e).__name__}: {e.message}")
                raise
