from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Activity, ActivitySettings
from .repository import ActivityRepository


def _to_activity(r: dict) -> Activity:
    return Activity(
        activity_id=int(r["activity_id"]),
        course_id=int(r["course_id"]),
        name=r["name"],
        intro=r.get("intro") or "",
        settings=ActivitySettings.from_json(r.get("settings_json")),
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, course_id, name, intro, settings_json
                FROM activities
                WHERE activity_id=%s
                """,
                (int(activity_id),),
            )
            r = fetchone(cur)
            return _to_activity(r) if r else None

    def list_for_course(self, course_id: int) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, course_id, name, intro, settings_json
                FROM activities
                WHERE course_id=%s
                ORDER BY activity_id ASC
                """,
                (int(course_id),),
            )
            return [_to_activity(r) for r in fetchall(cur)]

    def create(self, *, course_id: int, name: str, intro: str, settings: ActivitySettings) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(course_id, name, intro, settings_json)
                VALUES(%s,%s,%s,%s)
                """,
                (int(course_id), name, intro, settings.to_json()),
            )
            return int(cur.lastrowid)

    def update(self, *, activity_id: int, name: str, intro: str, settings: ActivitySettings) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE activities
                SET name=%s, intro=%s, settings_json=%s
                WHERE activity_id=%s
                """,
                (name, intro, settings.to_json(), int(activity_id)),
            )
            return cur.rowcount > 0

    def delete(self, activity_id: int) -> bool:
        # One transaction: events, locations, then the activity row.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timecard_events WHERE activity_id=%s", (int(activity_id),))
            cur.execute("DELETE FROM locations WHERE activity_id=%s", (int(activity_id),))
            cur.execute("DELETE FROM activities WHERE activity_id=%s", (int(activity_id),))
            return cur.rowcount > 0
