from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..common.datetime_utils import DayWindow
from ..core.enums import AttendanceAction, SessionState
from ..core.exceptions import DuplicateSession, NoOpenSession, RecordNotFound, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float
from .model import AttendanceRecord, CheckInMutation, CheckOutMutation, Identity
from .repository import AttendanceRepository

_SELECT = """
    SELECT
        a.attendance_id, a.person_name, a.division_id, a.campus_id,
        a.check_in_time, a.check_in_latitude, a.check_in_longitude,
        a.check_out_time, a.check_out_latitude, a.check_out_longitude,
        d.name AS division_name, c.name AS campus_name
    FROM attendances a
    LEFT JOIN divisions d ON d.division_id = a.division_id
    LEFT JOIN campuses c ON c.campus_id = a.campus_id
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        person_name=r["person_name"],
        division_id=int(r["division_id"]),
        campus_id=int(r["campus_id"]),
        check_in_time=r["check_in_time"],
        check_in_lat=to_float(r["check_in_latitude"]),
        check_in_lon=to_float(r["check_in_longitude"]),
        check_out_time=r.get("check_out_time"),
        check_out_lat=to_float(r.get("check_out_latitude")),
        check_out_lon=to_float(r.get("check_out_longitude")),
        division_name=r.get("division_name"),
        campus_name=r.get("campus_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Record store backed by the `attendances` table.

    The table's unique key on (person_name, division_id, campus_id,
    check_in_date) is what enforces one session per identity and day when
    two check-ins race.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_in_window(self, identity: Identity, window: DayWindow) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE a.person_name=%s AND a.division_id=%s AND a.campus_id=%s
                  AND a.check_in_time >= %s AND a.check_in_time < %s
                ORDER BY a.check_in_time ASC
                """,
                (identity.person_name, identity.division_id, identity.campus_id, window.start, window.end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def insert(self, mutation: CheckInMutation) -> AttendanceRecord:
        identity = mutation.identity
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(
                        person_name, division_id, campus_id,
                        check_in_time, check_in_latitude, check_in_longitude
                    )
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        identity.person_name,
                        identity.division_id,
                        identity.campus_id,
                        mutation.check_in_time,
                        mutation.point.latitude,
                        mutation.point.longitude,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except mysql_errors.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateSession(action=AttendanceAction.CHECK_IN) from e
            if e.errno == errorcode.ER_NO_REFERENCED_ROW_2:
                raise ValidationError("Unknown division or campus") from e
            raise

        return AttendanceRecord(
            attendance_id=attendance_id,
            person_name=identity.person_name,
            division_id=int(identity.division_id),
            campus_id=int(identity.campus_id),
            check_in_time=mutation.check_in_time,
            check_in_lat=mutation.point.latitude,
            check_in_lon=mutation.point.longitude,
        )

    def update_checkout(self, mutation: CheckOutMutation) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (mutation.check_out_time, mutation.point.latitude, mutation.point.longitude, mutation.attendance_id),
            )
            if cur.rowcount > 0:
                return

            # Nothing updated: either the record is gone or another request closed it first.
            cur.execute("SELECT attendance_id FROM attendances WHERE attendance_id=%s", (mutation.attendance_id,))
            if fetchone(cur) is None:
                raise RecordNotFound(mutation.attendance_id)
            raise NoOpenSession(action=AttendanceAction.CHECK_OUT, state=SessionState.CHECKED_OUT)

    def list_in_window(self, window: DayWindow, *, division_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        where = "a.check_in_time >= %s AND a.check_in_time < %s"
        params: list[Any] = [window.start, window.end]
        if division_id is not None:
            where += " AND a.division_id=%s"
            params.append(division_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE {where}
                ORDER BY a.check_in_time DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
