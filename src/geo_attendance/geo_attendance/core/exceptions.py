from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from .enums import AttendanceAction, SessionState

if TYPE_CHECKING:
    from ..locations.registry import GeofenceCheck


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AttendanceRejected(ValidationError):
    """A check-in/check-out request was refused.

    Carries the current session state and the geofence evaluation (nearest
    office, distance) so the caller can render an actionable message.
    """

    code = "ATTENDANCE_REJECTED"
    default_message = "Attendance request rejected"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        action: Optional[AttendanceAction] = None,
        state: Optional[SessionState] = None,
        geofence: Optional["GeofenceCheck"] = None,
    ):
        self.action = action
        self.state = state
        self.geofence = geofence
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        return self.default_message

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error": self.code,
            "message": self.message,
            "action": self.action.value if self.action else None,
            "state": self.state.value if self.state else None,
        }
        if self.geofence is not None:
            data.update(self.geofence.to_dict())
        return data


class IncompleteIdentity(AttendanceRejected):
    code = "INCOMPLETE_IDENTITY"
    default_message = "Name, division and campus are required"


class NoActiveLocations(AttendanceRejected):
    code = "NO_ACTIVE_LOCATIONS"
    default_message = "No active office location is configured"


class OutsideGeofence(AttendanceRejected):
    code = "OUTSIDE_GEOFENCE"
    default_message = "You are outside the area allowed for attendance"

    def _default_message(self) -> str:
        if self.geofence is None or self.geofence.nearest is None:
            return self.default_message
        return (
            f"{self.default_message} "
            f"({self.geofence.nearest_distance_meters:.0f} m from {self.geofence.nearest.name}, "
            f"allowed radius {self.geofence.nearest.radius_meters:.0f} m)"
        )


class DuplicateSession(AttendanceRejected):
    code = "DUPLICATE_SESSION"
    default_message = "Attendance for today has already been recorded"

    def _default_message(self) -> str:
        if self.state == SessionState.CHECKED_IN:
            return "You have already checked in today"
        if self.state == SessionState.CHECKED_OUT:
            return "You have already checked in and out today"
        return self.default_message


class NoOpenSession(AttendanceRejected):
    code = "NO_OPEN_SESSION"
    default_message = "No open check-in found for today"

    def _default_message(self) -> str:
        if self.state == SessionState.CHECKED_OUT:
            return "You have already checked out today"
        return self.default_message


class IntegrityError(DomainError):
    """Store invariant violated (e.g. two sessions for one identity and day).

    This is a system fault, not a user-correctable input error.
    """

    code = "INTEGRITY_ERROR"

    def __init__(self, message: str, *, record_ids: Sequence[int] = ()):
        super().__init__(message)
        self.message = message
        self.record_ids = tuple(record_ids)


class RecordNotFound(DomainError):
    """Raised by the record store when an update targets a missing record."""

    code = "RECORD_NOT_FOUND"

    def __init__(self, attendance_id: int):
        super().__init__(f"Attendance record {attendance_id} does not exist")
        self.attendance_id = attendance_id
