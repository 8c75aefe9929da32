from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Group, Member
from .repository import MemberRepository

_MEMBER_COLUMNS = "m.member_id, m.first_name, m.last_name, m.idnumber, m.email, m.username, m.phone1, m.phone2"


def _to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["member_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        idnumber=r.get("idnumber"),
        email=r.get("email"),
        username=r.get("username"),
        phone1=r.get("phone1"),
        phone2=r.get("phone2"),
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, member_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_MEMBER_COLUMNS} FROM members m WHERE m.member_id=%s", (int(member_id),))
            r = fetchone(cur)
            return _to_member(r) if r else None

    def get_many(self, member_ids: Iterable[int]) -> Sequence[Member]:
        clause, params = in_clause("m.member_id", [int(i) for i in member_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MEMBER_COLUMNS} FROM members m WHERE {clause} ORDER BY m.last_name ASC, m.member_id ASC",
                tuple(params),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def get_eligible_members(
        self,
        *,
        course_id: int,
        group_id: Optional[int] = None,
        grouping_id: Optional[int] = None,
    ) -> Sequence[Member]:
        clauses = ["e.course_id=%s", "e.can_sign=1"]
        params: list[object] = [int(course_id)]

        if group_id:
            clauses.append("EXISTS (SELECT 1 FROM group_members gm WHERE gm.member_id=m.member_id AND gm.group_id=%s)")
            params.append(int(group_id))
        elif grouping_id:
            clauses.append(
                """
                EXISTS (
                    SELECT 1 FROM group_members gm
                    JOIN member_groups g ON g.group_id = gm.group_id
                    WHERE gm.member_id=m.member_id AND g.grouping_id=%s
                )
                """
            )
            params.append(int(grouping_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MEMBER_COLUMNS}
                FROM members m
                JOIN course_enrolments e ON e.member_id = m.member_id
                WHERE {where}
                ORDER BY m.last_name ASC, m.member_id ASC
                """,
                tuple(params),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def list_groups(self, *, course_id: int, grouping_id: Optional[int] = None) -> Sequence[Group]:
        clauses = ["course_id=%s"]
        params: list[object] = [int(course_id)]
        if grouping_id:
            clauses.append("grouping_id=%s")
            params.append(int(grouping_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT group_id, course_id, name, grouping_id
                FROM member_groups
                WHERE {" AND ".join(clauses)}
                ORDER BY name ASC
                """,
                tuple(params),
            )
            return [
                Group(
                    group_id=int(r["group_id"]),
                    course_id=int(r["course_id"]),
                    name=r["name"],
                    grouping_id=int(r["grouping_id"]) if r.get("grouping_id") else None,
                )
                for r in fetchall(cur)
            ]

    def groups_for_members(self, *, course_id: int, member_ids: Iterable[int]) -> Mapping[int, Sequence[str]]:
        clause, params = in_clause("gm.member_id", [int(i) for i in member_ids])
        out: dict[int, list[str]] = {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT gm.member_id, g.name
                FROM group_members gm
                JOIN member_groups g ON g.group_id = gm.group_id
                WHERE g.course_id=%s AND {clause}
                ORDER BY g.name ASC
                """,
                tuple([int(course_id), *params]),
            )
            for r in fetchall(cur):
                out.setdefault(int(r["member_id"]), []).append(r["name"])
        return out

    def member_ids_enrolled_in(self, course_ids: Iterable[int]) -> set[int]:
        clause, params = in_clause("course_id", [int(i) for i in course_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT DISTINCT member_id FROM course_enrolments WHERE {clause}", tuple(params))
            return {int(r["member_id"]) for r in fetchall(cur)}
