from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from ..common.datetime_utils import Clock, SystemClock, day_window
from ..core.constants import UNKNOWN_DIVISION_LABEL
from ..core.enums import SessionState
from ..core.exceptions import AttendanceRejected
from ..geo.model import Coordinate
from ..locations.registry import GeofenceCheck, LocationRegistry
from ..locations.repository import LocationRepository
from .duration import format_worked_hours
from .model import AttendanceRecord, Identity
from .repository import AttendanceRepository
from .resolver import SessionResolver
from .state_machine import AttendanceStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceStatusView:
    """Current state of an identity for today, plus location feedback."""

    identity: Identity
    state: SessionState
    record: Optional[AttendanceRecord]
    geofence: Optional[GeofenceCheck]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "state": self.state.value,
            "can_check_in": self.state == SessionState.NO_SESSION,
            "can_check_out": self.state == SessionState.CHECKED_IN,
            "record": record_to_dict(self.record) if self.record else None,
        }
        if self.geofence is not None:
            data.update(self.geofence.to_dict())
        return data


def record_to_dict(r: AttendanceRecord) -> dict[str, Any]:
    return {
        "attendance_id": r.attendance_id,
        "name": r.person_name,
        "division_id": r.division_id,
        "division_name": r.division_name,
        "campus_id": r.campus_id,
        "campus_name": r.campus_name,
        "date": r.check_in_time.strftime("%Y-%m-%d"),
        "check_in": r.check_in_time.strftime("%H:%M:%S"),
        "check_out": r.check_out_time.strftime("%H:%M:%S") if r.check_out_time else "-",
        "check_in_location": {"latitude": r.check_in_lat, "longitude": r.check_in_lon},
        "check_out_location": (
            {"latitude": r.check_out_lat, "longitude": r.check_out_lon} if r.check_out_time else None
        ),
        "worked_hours": format_worked_hours(r),
    }


class AttendanceService:
    """Use case: geofenced check-in / check-out.

    Each transition reads the clock once, takes a fresh snapshot of the active
    locations, resolves today's session and lets the state machine decide.
    The resolve -> decide -> persist sequence is not locked here; the store's
    unique key on identity + day is what makes concurrent check-ins safe.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        locations: LocationRepository,
        *,
        clock: Optional[Clock] = None,
        resolver: Optional[SessionResolver] = None,
        state_machine: Optional[AttendanceStateMachine] = None,
    ):
        self._attendance = attendance
        self._locations = locations
        self._clock = clock or SystemClock()
        self._resolver = resolver or SessionResolver(attendance)
        self._machine = state_machine or AttendanceStateMachine()

    def _current_session(self, identity: Identity, today: date) -> Optional[AttendanceRecord]:
        if not identity.is_complete:
            return None
        return self._resolver.find_open_or_today_session(identity, today)

    def check_in(self, identity: Identity, point: Coordinate) -> AttendanceRecord:
        now = self._clock.now()
        registry = LocationRegistry.load(self._locations)
        existing = self._current_session(identity, now.date())

        try:
            mutation = self._machine.request_check_in(identity, point, now, existing=existing, registry=registry)
        except AttendanceRejected as e:
            logger.info("Check-in rejected for %s: %s", identity.describe(), e.code)
            raise

        record = self._attendance.insert(mutation)
        logger.info("Checked in %s at %s (attendance_id=%s)", identity.describe(), now.isoformat(), record.attendance_id)
        return record

    def check_out(self, identity: Identity, point: Coordinate) -> AttendanceRecord:
        now = self._clock.now()
        registry = LocationRegistry.load(self._locations)
        existing = self._current_session(identity, now.date())

        try:
            mutation = self._machine.request_check_out(identity, point, now, existing=existing, registry=registry)
        except AttendanceRejected as e:
            logger.info("Check-out rejected for %s: %s", identity.describe(), e.code)
            raise

        self._attendance.update_checkout(mutation)
        logger.info("Checked out %s at %s (attendance_id=%s)", identity.describe(), now.isoformat(), mutation.attendance_id)
        # existing is not None here: the state machine only allows check-out of an open record.
        return existing.with_checkout(mutation)

    def get_status(self, identity: Identity, point: Optional[Coordinate] = None) -> AttendanceStatusView:
        today = self._clock.now().date()
        record = self._current_session(identity, today)

        geofence = None
        if point is not None:
            geofence = LocationRegistry.load(self._locations).evaluate(point)

        return AttendanceStatusView(
            identity=identity,
            state=self._machine.state_of(record),
            record=record,
            geofence=geofence,
        )

    def list_for_day(self, day: Optional[date] = None, *, division_id: Optional[int] = None) -> list[dict[str, Any]]:
        day = day or self._clock.now().date()
        rows = self._attendance.list_in_window(day_window(day), division_id=division_id)
        return [record_to_dict(r) for r in rows]


def group_by_division(rows: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group listing rows by division name, keeping the row order."""

    groups: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(row.get("division_name") or UNKNOWN_DIVISION_LABEL, []).append(row)
    return groups
