#!/usr/bin/env python3
"""
Walk one slot through its full lifecycle in-process.

Authorizes a surgeon and three patients, opens a slot, collects requests
at mid-morning, then runs selection at the 13:00 assignment hour.
"""

import sys
import os
import logging
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from surgery_scheduler.config import config
from surgery_scheduler.core import (
    ManualClock,
    NotificationRecorder,
    Principal,
    SchedulerError,
    SurgeryScheduler,
)


def main():
    logging.basicConfig(level=config.LOG_LEVEL)

    clock = ManualClock(datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc))
    scheduler = SurgeryScheduler.from_config(config, clock=clock)
    recorder = NotificationRecorder()
    scheduler.bus.subscribe(recorder)

    admin = scheduler.admin
    surgeon = Principal("surgeon-1")
    patients = [Principal("patient-a"), Principal("patient-b"), Principal("patient-c")]

    print("\n--- Authorizing roles ---")
    scheduler.authorize_surgeon(admin, surgeon)
    for patient in patients:
        scheduler.authorize_patient(admin, patient)
    print(f"  ✓ Surgeon: {surgeon}")
    print(f"  ✓ Patients: {', '.join(str(p) for p in patients)}")

    print("\n--- Opening slot ---")
    slot = scheduler.create_slot(surgeon, surgeon_id=1, schedule_time=1741000000, max_capacity=2)
    print(f"  ✓ Slot {slot.id} open (capacity {slot.max_capacity})")

    print("\n--- Collecting requests ---")
    for patient, patient_id, urgency in zip(patients, (1001, 1002, 1003), (7, 9, 5)):
        try:
            scheduler.request_appointment(patient, patient_id, urgency, surgery_type=5)
            print(f"  ✓ {patient} requested")
        except SchedulerError as e:
            print(f"  ✗ {patient} rejected: {type(e).__name__}: {e.message}")

    print("\n--- Running selection at 13:00 ---")
    clock.set_hour(13)
    result = scheduler.process_assignments(admin)
    print(f"  Result: {result.to_dict()}")

    print("\n--- Notifications ---")
    for notification in recorder.notifications:
        print(f"  {notification.event_type}: {notification.data}")

    print(f"\n  Current slot id: {scheduler.current_id}")


if __name__ == "__main__":
    main()
