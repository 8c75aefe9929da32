from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import Direction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LatestEvents, StatusScope, TimecardEvent
from .repository import EventStore

_COLUMNS = "event_id, member_id, activity_id, location_id, timelog, direction, origin_address"


def _to_event(r: dict) -> TimecardEvent:
    return TimecardEvent(
        event_id=int(r["event_id"]),
        member_id=int(r["member_id"]),
        activity_id=int(r["activity_id"]),
        location_id=int(r["location_id"]),
        timestamp=int(r["timelog"]),
        direction=Direction(r["direction"]),
        origin_address=r.get("origin_address") or "",
    )


def _scope_clauses(scope: StatusScope) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if scope.location_id is not None:
        clauses.append("location_id=%s")
        params.append(int(scope.location_id))
    if scope.origin_address is not None:
        clauses.append("origin_address=%s")
        params.append(scope.origin_address)
    return clauses, params


class MySQLTimecardRepository(EventStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        member_id: int,
        activity_id: int,
        location_id: int,
        timestamp: int,
        direction: Direction,
        origin_address: str,
    ) -> TimecardEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO timecard_events(member_id, activity_id, location_id, timelog, direction, origin_address)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(member_id), int(activity_id), int(location_id), int(timestamp), direction.value, origin_address or ""),
            )
            event_id = int(cur.lastrowid)

        return TimecardEvent(
            event_id=event_id,
            member_id=int(member_id),
            activity_id=int(activity_id),
            location_id=int(location_id),
            timestamp=int(timestamp),
            direction=direction,
            origin_address=origin_address or "",
        )

    def latest_events(self, *, member_id: int, activity_id: int, scope: StatusScope) -> LatestEvents:
        extra, extra_params = _scope_clauses(scope)
        where = " AND ".join(["activity_id=%s", "member_id=%s", "direction=%s", *extra])

        found: dict[Direction, Optional[TimecardEvent]] = {}
        with db_cursor(self._conn_factory) as (_, cur):
            for direction in (Direction.IN, Direction.OUT):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM timecard_events
                    WHERE {where}
                    ORDER BY timelog DESC, event_id DESC
                    LIMIT 1
                    """,
                    (int(activity_id), int(member_id), direction.value, *extra_params),
                )
                r = fetchone(cur)
                found[direction] = _to_event(r) if r else None

        return LatestEvents(last_in=found[Direction.IN], last_out=found[Direction.OUT])

    def latest_events_for_members(
        self,
        *,
        activity_id: int,
        member_ids: Iterable[int],
        scope: StatusScope,
    ) -> Mapping[int, LatestEvents]:
        members_clause, member_params = in_clause("member_id", [int(i) for i in member_ids])
        extra, extra_params = _scope_clauses(scope)
        where = " AND ".join(["activity_id=%s", members_clause, *extra])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM (
                    SELECT {_COLUMNS},
                           ROW_NUMBER() OVER (
                               PARTITION BY member_id, direction
                               ORDER BY timelog DESC, event_id DESC
                           ) AS rn
                    FROM timecard_events
                    WHERE {where}
                ) latest
                WHERE rn = 1
                """,
                (int(activity_id), *member_params, *extra_params),
            )
            rows = fetchall(cur)

        pairs: dict[int, dict[Direction, TimecardEvent]] = {}
        for r in rows:
            event = _to_event(r)
            pairs.setdefault(event.member_id, {})[event.direction] = event

        return {
            member_id: LatestEvents(last_in=p.get(Direction.IN), last_out=p.get(Direction.OUT))
            for member_id, p in pairs.items()
        }

    def list_sign_ins(
        self,
        *,
        activity_id: int,
        since: Optional[int] = None,
        until: Optional[int] = None,
        member_ids: Optional[Sequence[int]] = None,
        location_ids: Optional[Sequence[int]] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[TimecardEvent]:
        clauses = ["activity_id=%s", "direction=%s"]
        params: list[object] = [int(activity_id), Direction.IN.value]

        if since is not None:
            clauses.append("timelog >= %s")
            params.append(int(since))
        if until is not None:
            clauses.append("timelog < %s")
            params.append(int(until))
        if member_ids is not None:
            clause, values = in_clause("member_id", [int(i) for i in member_ids])
            clauses.append(clause)
            params.extend(values)
        if location_ids is not None:
            clause, values = in_clause("location_id", [int(i) for i in location_ids])
            clauses.append(clause)
            params.extend(values)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM timecard_events
                WHERE {where}
                ORDER BY timelog DESC, event_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def next_event(
        self,
        *,
        after: TimecardEvent,
        direction: Direction,
        location_id: Optional[int] = None,
    ) -> Optional[TimecardEvent]:
        clauses = [
            "activity_id=%s",
            "member_id=%s",
            "direction=%s",
            "(timelog > %s OR (timelog = %s AND event_id > %s))",
        ]
        params: list[object] = [
            after.activity_id,
            after.member_id,
            direction.value,
            after.timestamp,
            after.timestamp,
            after.event_id,
        ]
        if location_id is not None:
            clauses.append("location_id=%s")
            params.append(int(location_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM timecard_events
                WHERE {" AND ".join(clauses)}
                ORDER BY timelog ASC, event_id ASC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def member_ids_with_events(self, activity_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT member_id FROM timecard_events WHERE activity_id=%s ORDER BY member_id",
                (int(activity_id),),
            )
            return [int(r["member_id"]) for r in fetchall(cur)]

    def location_ids_with_events(self, activity_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT location_id FROM timecard_events WHERE activity_id=%s ORDER BY location_id",
                (int(activity_id),),
            )
            return [int(r["location_id"]) for r in fetchall(cur)]
