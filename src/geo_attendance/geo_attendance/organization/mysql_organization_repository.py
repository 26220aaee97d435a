from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Campus, Division
from .repository import OrganizationRepository


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_divisions(self) -> Sequence[Division]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT division_id, name FROM divisions ORDER BY name")
            rows = fetchall(cur)
            return [Division(division_id=int(r["division_id"]), name=r["name"]) for r in rows]

    def list_campuses(self) -> Sequence[Campus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT campus_id, name FROM campuses ORDER BY name")
            rows = fetchall(cur)
            return [Campus(campus_id=int(r["campus_id"]), name=r["name"]) for r in rows]
