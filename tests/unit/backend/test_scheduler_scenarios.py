"""
End-to-end scheduling scenarios and invariants.

Tests:
- Full admission -> assignment cycles across several slots
- Invariants after every call, including failed ones
- Serialized behaviour under concurrent callers
"""

import threading
import pytest
from datetime import datetime, timezone

from surgery_scheduler.core import (
    CapacityExceeded,
    EventType,
    ManualClock,
    NotificationRecorder,
    Principal,
    SchedulerError,
    SlotState,
    SurgeryScheduler,
)


ADMIN = Principal("admin")
SURGEON = Principal("surgeon-s")
A = Principal("patient-a")
B = Principal("patient-b")
C = Principal("patient-c")


@pytest.fixture
def clock():
    return ManualClock(datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def recorder():
    return NotificationRecorder()


@pytest.fixture
def scheduler(clock, recorder):
    scheduler = SurgeryScheduler(admin=ADMIN, clock=clock)
    scheduler.bus.subscribe(recorder)
    return scheduler


def assert_invariants(scheduler):
    lifecycle = scheduler.lifecycle
    open_slots = lifecycle.open_slots()
    assert len(open_slots) <= 1
    if open_slots:
        assert open_slots[0].id == lifecycle.current_id
    for slot in lifecycle.slots.values():
        assert slot.bookings == len(slot.requesters) <= slot.max_capacity
        assert len(set(slot.requesters)) == len(slot.requesters)
        if slot.assigned:
            assert slot.state == SlotState.CLOSED
        assert slot.id <= lifecycle.current_id
    for (slot_id, principal) in lifecycle.requests:
        assert principal in lifecycle.slots[slot_id].requesters


# =============================================================================
# Scenarios
# =============================================================================

class TestScenarios:
    """Complete flows."""

    def test_capacity_then_assignment(self, scheduler, clock, recorder):
        scheduler.authorize_surgeon(ADMIN, SURGEON)
        for patient in (A, B, C):
            scheduler.authorize_patient(ADMIN, patient)

        clock.set_hour(10)
        scheduler.create_slot(SURGEON, surgeon_id=1, schedule_time=1234567890, max_capacity=2)
        scheduler.request_appointment(A, 1001, 7, 3)
        scheduler.request_appointment(B, 1002, 9, 3)
        with pytest.raises(CapacityExceeded):
            scheduler.request_appointment(C, 1003, 10, 3)
        assert_invariants(scheduler)

        clock.set_hour(13)
        result = scheduler.process_assignments(ADMIN)

        assert result.principal == B
        assigned = recorder.of_type(EventType.SLOT_ASSIGNED)
        assert len(assigned) == 1
        assert assigned[0].data == {"slot_id": 1, "patient": "patient-b", "urgency": 9}
        assert scheduler.current_id == 2
        assert_invariants(scheduler)

    def test_no_requests_then_next_morning(self, scheduler, clock, recorder):
        scheduler.authorize_surgeon(ADMIN, SURGEON)
        clock.set_hour(10)
        scheduler.create_slot(SURGEON, 1, 1234567890, 3)

        clock.set_hour(17)
        scheduler.process_assignments(ADMIN)
        no_assignment = recorder.of_type(EventType.NO_ASSIGNMENT)
        assert [n.data["reason"] for n in no_assignment] == ["no requests received"]

        clock.set_hour(8)
        slot = scheduler.create_slot(SURGEON, 1, 1234567990, 3)
        assert slot.id == 2
        assert scheduler.current_slot_info()["slot_generated"] is True
        assert_invariants(scheduler)

    def test_multiple_slots_in_sequence(self, scheduler, clock):
        scheduler.authorize_surgeon(ADMIN, SURGEON)
        scheduler.authorize_patient(ADMIN, A)
        scheduler.authorize_patient(ADMIN, B)

        clock.set_hour(8)
        scheduler.create_slot(SURGEON, 1, 1234567890, 3)
        scheduler.request_appointment(A, 1001, 7, 5)
        clock.set_hour(9)
        scheduler.process_assignments(ADMIN)
        assert scheduler.current_slot_info()["slot_id"] == 2

        clock.set_hour(10)
        scheduler.create_slot(SURGEON, 2, 1234567900, 3)
        scheduler.request_appointment(B, 1002, 8, 6)
        # A may request again on a new slot
        scheduler.request_appointment(A, 1001, 2, 6)
        clock.set_hour(13)
        scheduler.process_assignments(ADMIN)
        assert scheduler.current_slot_info()["slot_id"] == 3

        assert scheduler.slot_history(1)["assigned_patient"] == "patient-a"
        assert scheduler.slot_history(2)["assigned_patient"] == "patient-b"
        assert scheduler.requesting_patients(ADMIN, 2) == [B, A]
        assert_invariants(scheduler)

    def test_admin_can_act_in_every_role(self, scheduler, clock):
        clock.set_hour(10)
        scheduler.create_slot(ADMIN, 1, 1234567890, 1)
        scheduler.request_appointment(ADMIN, 1, 5, 5)
        clock.set_hour(13)
        assert scheduler.process_assignments(ADMIN).principal == ADMIN


# =============================================================================
# Invariants under arbitrary call sequences
# =============================================================================

class TestInvariants:
    """Invariants hold after every call, successful or not."""

    def test_mixed_sequence(self, scheduler, clock):
        patients = [Principal(f"patient-{i}") for i in range(6)]
        scheduler.authorize_surgeon(ADMIN, SURGEON)
        for patient in patients:
            scheduler.authorize_patient(ADMIN, patient)

        steps = [
            lambda: clock.set_hour(7),
            lambda: scheduler.create_slot(SURGEON, 1, 100, 3),
            lambda: clock.set_hour(10),
            lambda: scheduler.create_slot(SURGEON, 1, 100, 3),
            lambda: scheduler.create_slot(SURGEON, 1, 100, 3),
            lambda: scheduler.request_appointment(patients[0], 1, 5, 5),
            lambda: scheduler.request_appointment(patients[0], 1, 6, 5),
            lambda: scheduler.request_appointment(patients[1], 2, 11, 5),
            lambda: scheduler.request_appointment(patients[1], 2, 8, 5),
            lambda: scheduler.request_appointment(patients[2], 3, 8, 5),
            lambda: scheduler.request_appointment(patients[3], 4, 9, 5),
            lambda: scheduler.process_assignments(ADMIN),
            lambda: clock.set_hour(13),
            lambda: scheduler.process_assignments(ADMIN),
            lambda: scheduler.process_assignments(ADMIN),
            lambda: scheduler.request_appointment(patients[4], 5, 5, 5),
            lambda: scheduler.create_slot(SURGEON, 1, 100, 2),
            lambda: scheduler.request_appointment(patients[4], 5, 5, 5),
            lambda: scheduler.emergency_assign(ADMIN, 2, patients[5]),
            lambda: scheduler.emergency_assign(ADMIN, 2, patients[4]),
            lambda: scheduler.create_slot(SURGEON, 1, 100, 2),
        ]
        failures = 0
        for step in steps:
            try:
                step()
            except SchedulerError:
                failures += 1
            assert_invariants(scheduler)

        assert failures == 9
        assert scheduler.slot_history(1)["assigned_patient"] == "patient-1"
        assert scheduler.slot_history(2)["assigned_patient"] == "patient-4"
        assert scheduler.current_id == 3


# =============================================================================
# Concurrency
# =============================================================================

class TestConcurrency:
    """Concurrent callers are serialized by the scheduler lock."""

    def test_capacity_holds_under_contention(self, scheduler, clock):
        patients = [Principal(f"patient-{i}") for i in range(20)]
        for patient in patients:
            scheduler.authorize_patient(ADMIN, patient)
        clock.set_hour(10)
        scheduler.create_slot(ADMIN, 1, 1234567890, 5)

        barrier = threading.Barrier(len(patients))
        outcomes = []
        outcomes_lock = threading.Lock()

        def submit(patient, urgency):
            barrier.wait()
            try:
                scheduler.request_appointment(patient, 1000, urgency, 1)
                outcome = "accepted"
            except CapacityExceeded:
                outcome = "full"
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [
            threading.Thread(target=submit, args=(p, (i % 10) + 1))
            for i, p in enumerate(patients)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("accepted") == 5
        assert outcomes.count("full") == 15
        slot = scheduler.lifecycle.current_slot()
        assert slot.bookings == len(slot.requesters) == 5
        assert len(scheduler.lifecycle.requests) == 5
        assert_invariants(scheduler)

    def test_duplicate_under_contention(self, scheduler, clock):
        scheduler.authorize_patient(ADMIN, A)
        clock.set_hour(10)
        scheduler.create_slot(ADMIN, 1, 1234567890, 10)

        barrier = threading.Barrier(8)
        accepted = []

        def submit():
            barrier.wait()
            try:
                scheduler.request_appointment(A, 1001, 5, 5)
                accepted.append(True)
            except SchedulerError:
                pass

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(accepted) == 1
        assert scheduler.lifecycle.current_slot().requesters == [A]


# =============================================================================
# Observers
# =============================================================================

class TestObservers:
    """Notifications reach observers without steering the core."""

    def test_failing_observer_does_not_abort(self, scheduler, clock, recorder):
        def broken(notification):
            raise RuntimeError("observer down")

        scheduler.bus.subscribe(broken)
        clock.set_hour(10)
        slot = scheduler.create_slot(ADMIN, 1, 1234567890, 2)

        assert slot.id == 1
        assert scheduler.current_slot_info()["slot_generated"] is True
        assert recorder.last().event_type == EventType.SLOT_CREATED

    def test_one_notification_per_transition(self, scheduler, clock, recorder):
        scheduler.authorize_patient(ADMIN, A)
        clock.set_hour(10)
        scheduler.create_slot(ADMIN, 1, 1234567890, 2)
        scheduler.request_appointment(A, 1001, 5, 5)
        clock.set_hour(13)
        scheduler.process_assignments(ADMIN)

        assert [n.event_type for n in recorder.notifications] == [
            EventType.PATIENT_AUTHORIZED,
            EventType.SLOT_CREATED,
            EventType.APPOINTMENT_REQUESTED,
            EventType.SLOT_ASSIGNED,
        ]

    def test_unsubscribe(self, scheduler, clock, recorder):
        scheduler.bus.unsubscribe(recorder)
        scheduler.authorize_patient(ADMIN, A)
        assert recorder.notifications == []
