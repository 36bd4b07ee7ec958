"""
Scheduler error taxonomy.

Every precondition violation raises one of these before any state is
touched, so a failed call leaves the aggregate exactly as it found it.
"""


class SchedulerError(Exception):
    """Base class for all scheduler failures."""

    code = "scheduler_error"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"ok": False, "error": self.message, "code": self.code}


class AuthorizationError(SchedulerError):
    """Caller lacks the required role."""
    code = "authorization_error"
    http_status = 403


class WindowViolation(SchedulerError):
    """Operation attempted outside its time window."""
    code = "window_violation"
    http_status = 409


class StateConflict(SchedulerError):
    """Slot is not in the lifecycle stage the operation needs."""
    code = "state_conflict"
    http_status = 409


class ValidationError(SchedulerError):
    """Argument outside its declared range."""
    code = "validation_error"
    http_status = 400


class CapacityExceeded(SchedulerError):
    code = "capacity_exceeded"
    http_status = 409


class DuplicateRequest(SchedulerError):
    code = "duplicate_request"
    http_status = 409


class NotFound(SchedulerError):
    code = "not_found"
    http_status = 404
