from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Location
from .repository import LocationRepository


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, location_id: int) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT location_id, activity_id, name FROM locations WHERE location_id=%s",
                (int(location_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Location(location_id=int(r["location_id"]), activity_id=int(r["activity_id"]), name=r["name"])

    def list_for_activity(self, activity_id: int) -> Sequence[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, activity_id, name
                FROM locations
                WHERE activity_id=%s
                ORDER BY location_id ASC
                """,
                (int(activity_id),),
            )
            return [
                Location(location_id=int(r["location_id"]), activity_id=int(r["activity_id"]), name=r["name"])
                for r in fetchall(cur)
            ]

    def create(self, *, activity_id: int, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO locations(activity_id, name) VALUES(%s,%s)", (int(activity_id), name))
            return int(cur.lastrowid)

    def rename(self, *, location_id: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE locations SET name=%s WHERE location_id=%s", (name, int(location_id)))
            return cur.rowcount > 0

    def delete(self, location_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM locations WHERE location_id=%s", (int(location_id),))
            return cur.rowcount > 0
