from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.geo_attendance.geo_attendance.attendance.model import (
    AttendanceRecord,
    CheckInMutation,
    CheckOutMutation,
    Identity,
)
from src.geo_attendance.geo_attendance.common.datetime_utils import DayWindow, FixedClock
from src.geo_attendance.geo_attendance.core.constants import EARTH_RADIUS_METERS
from src.geo_attendance.geo_attendance.core.exceptions import RecordNotFound
from src.geo_attendance.geo_attendance.geo.model import Coordinate
from src.geo_attendance.geo_attendance.locations.model import OfficeLocation
from src.geo_attendance.geo_attendance.organization.model import Campus, Division


class InMemoryAttendance:
    def __init__(self, division_names=None, campus_names=None):
        self.records: list[AttendanceRecord] = []
        self._id = 0
        self.division_names = dict(division_names or {})
        self.campus_names = dict(campus_names or {})

    def _named(self, r: AttendanceRecord) -> AttendanceRecord:
        return replace(
            r,
            division_name=self.division_names.get(r.division_id),
            campus_name=self.campus_names.get(r.campus_id),
        )

    def seed(self, record: AttendanceRecord) -> AttendanceRecord:
        self.records.append(record)
        self._id = max(self._id, record.attendance_id)
        return record

    def find_in_window(self, identity: Identity, window: DayWindow):
        return [
            r
            for r in self.records
            if r.identity == identity and window.contains(r.check_in_time)
        ]

    def insert(self, mutation: CheckInMutation) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            person_name=mutation.identity.person_name,
            division_id=mutation.identity.division_id,
            campus_id=mutation.identity.campus_id,
            check_in_time=mutation.check_in_time,
            check_in_lat=mutation.point.latitude,
            check_in_lon=mutation.point.longitude,
        )
        self.records.append(rec)
        return rec

    def update_checkout(self, mutation: CheckOutMutation) -> None:
        for i, r in enumerate(self.records):
            if r.attendance_id == mutation.attendance_id:
                self.records[i] = r.with_checkout(mutation)
                return
        raise RecordNotFound(mutation.attendance_id)

    def list_in_window(self, window: DayWindow, *, division_id=None):
        rows = [
            self._named(r)
            for r in self.records
            if window.contains(r.check_in_time) and (division_id is None or r.division_id == division_id)
        ]
        rows.sort(key=lambda r: r.check_in_time, reverse=True)
        return rows

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return next((r for r in self.records if r.attendance_id == attendance_id), None)


class InMemoryOrganization:
    def __init__(self, divisions=(), campuses=()):
        self.divisions = list(divisions)
        self.campuses = list(campuses)

    def list_divisions(self):
        return sorted(self.divisions, key=lambda d: d.name)

    def list_campuses(self):
        return sorted(self.campuses, key=lambda c: c.name)


class ScriptedCursor:
    def __init__(self, db: "ScriptedDatabase"):
        self._db = db
        self._rows: list = []
        self.rowcount = -1
        self.lastrowid = None

    def execute(self, sql, params=None):
        self._db.executed.append((" ".join(sql.split()), params))
        step = self._db.steps.pop(0) if self._db.steps else {}
        if step.get("error") is not None:
            raise step["error"]
        self._rows = list(step.get("rows", []))
        self.rowcount = step.get("rowcount", len(self._rows))
        self.lastrowid = step.get("lastrowid")

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, db: "ScriptedDatabase"):
        self._db = db

    def cursor(self, dictionary=False):
        return ScriptedCursor(self._db)

    def commit(self):
        self._db.commits += 1

    def rollback(self):
        self._db.rollbacks += 1

    def close(self):
        pass


class ScriptedDatabase:
    """Stands in for DatabaseConnection; each execute() consumes one scripted step."""

    def __init__(self):
        self.steps: list[dict] = []
        self.executed: list[tuple] = []
        self.commits = 0
        self.rollbacks = 0

    def script(self, **step) -> "ScriptedDatabase":
        self.steps.append(step)
        return self

    def connect(self, *, with_database: bool = True):
        return ScriptedConnection(self)


class InMemoryLocations:
    def __init__(self, locations=()):
        self.locations = list(locations)

    def list_active(self):
        return [loc for loc in self.locations if loc.is_active]


def point_north_of(origin: Coordinate, meters: float) -> Coordinate:
    """Point `meters` due north of origin along the meridian."""

    return Coordinate(
        latitude=origin.latitude + math.degrees(meters / EARTH_RADIUS_METERS),
        longitude=origin.longitude,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def head_office() -> OfficeLocation:
    return OfficeLocation(
        location_id=1,
        name="Head Office",
        latitude=-6.200000,
        longitude=106.816666,
        radius_meters=100,
    )


@pytest.fixture
def branch_office() -> OfficeLocation:
    # About 6 km north-east of the head office.
    return OfficeLocation(
        location_id=2,
        name="Branch Office",
        latitude=-6.175110,
        longitude=106.865036,
        radius_meters=150,
    )


@pytest.fixture
def identity() -> Identity:
    return Identity.of("Budi Santoso", 1, 2)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance({1: "Academic", 3: "IT"}, {1: "Campus A", 2: "Campus B"})


@pytest.fixture
def organization_repo() -> InMemoryOrganization:
    return InMemoryOrganization(
        [Division(1, "Academic"), Division(3, "IT")],
        [Campus(2, "Campus B"), Campus(1, "Campus A")],
    )


@pytest.fixture
def db() -> ScriptedDatabase:
    return ScriptedDatabase()


@pytest.fixture
def locations_repo(head_office, branch_office) -> InMemoryLocations:
    return InMemoryLocations([head_office, branch_office])


@pytest.fixture
def north_of():
    return point_north_of


@pytest.fixture
def make_record(identity, head_office):
    def _make(attendance_id: int = 1, *, check_in_time: datetime, check_out_time=None, who: Identity = None):
        who = who or identity
        rec = AttendanceRecord(
            attendance_id=attendance_id,
            person_name=who.person_name,
            division_id=who.division_id,
            campus_id=who.campus_id,
            check_in_time=check_in_time,
            check_in_lat=head_office.latitude,
            check_in_lon=head_office.longitude,
        )
        if check_out_time is not None:
            rec = replace(
                rec,
                check_out_time=check_out_time,
                check_out_lat=head_office.latitude,
                check_out_lon=head_office.longitude,
            )
        return rec

    return _make
