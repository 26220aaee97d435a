from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceAction, SessionState
from ..core.exceptions import (
    DuplicateSession,
    IncompleteIdentity,
    NoActiveLocations,
    NoOpenSession,
    OutsideGeofence,
)
from ..geo.model import Coordinate
from ..locations.registry import GeofenceCheck, LocationRegistry
from .model import AttendanceRecord, CheckInMutation, CheckOutMutation, Identity


class AttendanceStateMachine:
    """Decides whether a check-in/check-out is permitted.

    States per identity and day: NO_SESSION -> CHECKED_IN -> CHECKED_OUT
    (terminal). The machine is pure: it never touches the store, it only
    returns the mutation to apply or raises an AttendanceRejected subclass.

    The geofence is evaluated again on check-out against every active office;
    it is not pinned to the office used for check-in.
    """

    @staticmethod
    def state_of(record: Optional[AttendanceRecord]) -> SessionState:
        if record is None:
            return SessionState.NO_SESSION
        if record.is_checked_out:
            return SessionState.CHECKED_OUT
        return SessionState.CHECKED_IN

    def request_check_in(
        self,
        identity: Identity,
        point: Coordinate,
        now: datetime,
        *,
        existing: Optional[AttendanceRecord],
        registry: LocationRegistry,
    ) -> CheckInMutation:
        action = AttendanceAction.CHECK_IN
        state = self.state_of(existing)
        if not identity.is_complete:
            raise IncompleteIdentity(action=action, state=state)

        geofence = self._evaluate(point, registry, action=action, state=state)
        if state != SessionState.NO_SESSION:
            raise DuplicateSession(action=action, state=state, geofence=geofence)
        if not geofence.is_valid:
            raise OutsideGeofence(action=action, state=state, geofence=geofence)

        return CheckInMutation(identity=identity, check_in_time=now, point=point)

    def request_check_out(
        self,
        identity: Identity,
        point: Coordinate,
        now: datetime,
        *,
        existing: Optional[AttendanceRecord],
        registry: LocationRegistry,
    ) -> CheckOutMutation:
        action = AttendanceAction.CHECK_OUT
        state = self.state_of(existing)
        if not identity.is_complete:
            raise IncompleteIdentity(action=action, state=state)

        geofence = self._evaluate(point, registry, action=action, state=state)
        if existing is None or state != SessionState.CHECKED_IN:
            raise NoOpenSession(action=action, state=state, geofence=geofence)
        if not geofence.is_valid:
            raise OutsideGeofence(action=action, state=state, geofence=geofence)

        return CheckOutMutation(attendance_id=existing.attendance_id, check_out_time=now, point=point)

    @staticmethod
    def _evaluate(
        point: Coordinate,
        registry: LocationRegistry,
        *,
        action: AttendanceAction,
        state: SessionState,
    ) -> GeofenceCheck:
        if registry.is_empty():
            raise NoActiveLocations(action=action, state=state)
        return registry.evaluate(point)
