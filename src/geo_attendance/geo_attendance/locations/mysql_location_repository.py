from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_float
from .model import OfficeLocation
from .repository import LocationRepository


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[OfficeLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, latitude, longitude, radius_meters, is_active
                FROM office_locations
                WHERE is_active=1
                ORDER BY name ASC, location_id ASC
                """
            )
            return [
                OfficeLocation(
                    location_id=int(r["location_id"]),
                    name=r["name"],
                    latitude=to_float(r["latitude"]),
                    longitude=to_float(r["longitude"]),
                    radius_meters=to_float(r["radius_meters"]),
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]
