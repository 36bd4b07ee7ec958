"""
Scheduler API Routes.

Endpoints:
- POST /api/v1/scheduler/surgeons - Authorize a surgeon (admin)
- POST /api/v1/scheduler/patients - Authorize a patient (admin)
- POST /api/v1/scheduler/slots - Open the next slot (surgeon, business hours)
- POST /api/v1/scheduler/requests - Request the current slot (patient)
- POST /api/v1/scheduler/assignments - Run selection (assignment hours)
- POST /api/v1/scheduler/slots/<id>/emergency - Emergency assignment (admin)
- GET /api/v1/scheduler/slots/current - Current slot summary
- GET /api/v1/scheduler/slots/current/status - Caller's request status
- GET /api/v1/scheduler/slots/<id> - Slot history
- GET /api/v1/scheduler/slots/<id>/requesters - Ordered requesters (admin)
- GET /api/v1/scheduler/slots/<id>/requests/me/<field> - Reveal own sealed field
- GET /api/v1/scheduler/clock/hour - Current hour-of-day
"""

from flask import Blueprint, current_app, request, jsonify

from surgery_scheduler.core import Principal, SchedulerError, SurgeryScheduler
from surgery_scheduler.services.auth_service import AuthService, get_auth_service


bp = Blueprint("scheduler", __name__, url_prefix="/api/v1/scheduler")


def _scheduler() -> SurgeryScheduler:
    return current_app.extensions["surgery_scheduler"]


def _auth_service() -> AuthService:
    return current_app.extensions.get("auth_service") or get_auth_service()


def _get_caller():
    """Get calling principal from Authorization header."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    token = auth_header[7:]  # Remove "Bearer " prefix
    return _auth_service().principal_from_token(token)


def _unauthorized():
    return jsonify({"ok": False, "error": "Missing or invalid token"}), 401


def _missing(data: dict, *fields):
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        return jsonify({"ok": False, "error": f"Missing fields: {', '.join(missing)}"}), 400
    return None


@bp.errorhandler(SchedulerError)
def handle_scheduler_error(error: SchedulerError):
    return jsonify(error.to_dict()), error.http_status


# =============================================================================
# Access registry
# =============================================================================

@bp.route("/surgeons", methods=["POST"])
def authorize_surgeon():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    data = request.json or {}
    error = _missing(data, "principal")
    if error:
        return error

    target = Principal(str(data["principal"]))
    _scheduler().authorize_surgeon(caller, target)
    return jsonify({"ok": True, "principal": str(target)})


@bp.route("/patients", methods=["POST"])
def authorize_patient():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    data = request.json or {}
    error = _missing(data, "principal")
    if error:
        return error

    target = Principal(str(data["principal"]))
    _scheduler().authorize_patient(caller, target)
    return jsonify({"ok": True, "principal": str(target)})


# =============================================================================
# Slot lifecycle
# =============================================================================

@bp.route("/slots", methods=["POST"])
def create_slot():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    data = request.json or {}
    error = _missing(data, "surgeon_id", "schedule_time", "max_capacity")
    if error:
        return error

    slot = _scheduler().create_slot(
        caller,
        surgeon_id=data["surgeon_id"],
        schedule_time=data["schedule_time"],
        max_capacity=data["max_capacity"],
    )
    return jsonify({"ok": True, "slot": slot.to_summary()}), 201


@bp.route("/requests", methods=["POST"])
def request_appointment():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    data = request.json or {}
    error = _missing(data, "patient_id", "urgency", "surgery_type")
    if error:
        return error

    appointment = _scheduler().request_appointment(
        caller,
        patient_id=data["patient_id"],
        urgency=data["urgency"],
        surgery_type=data["surgery_type"],
    )
    return jsonify({
        "ok": True,
        "slot_id": appointment.slot_id,
        "submitted_at": appointment.submitted_at.isoformat(),
    }), 201


@bp.route("/assignments", methods=["POST"])
def process_assignments():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()

    result = _scheduler().process_assignments(caller)
    return jsonify({"ok": True, "result": result.to_dict()})


@bp.route("/slots/<int:slot_id>/emergency", methods=["POST"])
def emergency_assign(slot_id: int):
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    data = request.json or {}
    error = _missing(data, "patient")
    if error:
        return error

    slot = _scheduler().emergency_assign(caller, slot_id, Principal(str(data["patient"])))
    return jsonify({"ok": True, "slot": slot.to_summary()})


# =============================================================================
# Queries
# =============================================================================

@bp.route("/slots/current", methods=["GET"])
def current_slot():
    return jsonify({"ok": True, "slot": _scheduler().current_slot_info()})


@bp.route("/slots/current/status", methods=["GET"])
def request_status():
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    return jsonify({"ok": True, **_scheduler().patient_request_status(caller)})


@bp.route("/slots/<int:slot_id>", methods=["GET"])
def slot_history(slot_id: int):
    return jsonify({"ok": True, "slot": _scheduler().slot_history(slot_id)})


@bp.route("/slots/<int:slot_id>/requesters", methods=["GET"])
def requesting_patients(slot_id: int):
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    patients = _scheduler().requesting_patients(caller, slot_id)
    return jsonify({"ok": True, "slot_id": slot_id, "patients": [str(p) for p in patients]})


@bp.route("/slots/<int:slot_id>/requests/me/<field>", methods=["GET"])
def reveal_own_field(slot_id: int, field: str):
    caller = _get_caller()
    if caller is None:
        return _unauthorized()
    value = _scheduler().reveal_request_field(caller, slot_id, field)
    return jsonify({"ok": True, "slot_id": slot_id, "field": field, "value": value})


@bp.route("/clock/hour", methods=["GET"])
def current_hour():
    return jsonify({"ok": True, "hour": _scheduler().current_hour()})
