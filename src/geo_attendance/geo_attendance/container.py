from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .database.connection import DatabaseConnection, DBConfig
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .organization.mysql_organization_repository import MySQLOrganizationRepository
from .organization.repository import OrganizationRepository


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    locations_repo: LocationRepository
    organization_repo: OrganizationRepository

    attendance_service: AttendanceService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    locations_repo = MySQLLocationRepository(conn)
    organization_repo = MySQLOrganizationRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        locations_repo,
        clock=clock or SystemClock(),
    )

    return Container(
        attendance_repo=attendance_repo,
        locations_repo=locations_repo,
        organization_repo=organization_repo,
        attendance_service=attendance_service,
        conn=conn,
    )
