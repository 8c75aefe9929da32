from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import pytest

from attendees.activities.model import Activity, ActivitySettings
from attendees.container import Container, assemble_container
from attendees.core.enums import Direction
from attendees.locations.model import Location
from attendees.members.model import Group, Member
from attendees.timecard.model import LatestEvents, StatusScope, TimecardEvent


def utc_ts(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> int:
    return int(datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc).timestamp())


class InMemoryEvents:
    def __init__(self):
        self.rows: list[TimecardEvent] = []
        self._id = 0

    def append(self, *, member_id, activity_id, location_id, timestamp, direction, origin_address) -> TimecardEvent:
        self._id += 1
        event = TimecardEvent(
            event_id=self._id,
            member_id=int(member_id),
            activity_id=int(activity_id),
            location_id=int(location_id),
            timestamp=int(timestamp),
            direction=direction,
            origin_address=origin_address or "",
        )
        self.rows.append(event)
        return event

    def _in_scope(self, e: TimecardEvent, scope: StatusScope) -> bool:
        if scope.location_id is not None and e.location_id != scope.location_id:
            return False
        if scope.origin_address is not None and e.origin_address != scope.origin_address:
            return False
        return True

    def latest_events(self, *, member_id, activity_id, scope) -> LatestEvents:
        return self.latest_events_for_members(activity_id=activity_id, member_ids=[member_id], scope=scope).get(
            member_id, LatestEvents()
        )

    def latest_events_for_members(self, *, activity_id, member_ids, scope):
        wanted = set(member_ids)
        found: dict[int, dict[Direction, TimecardEvent]] = {}
        for e in self.rows:
            if e.activity_id != activity_id or e.member_id not in wanted or not self._in_scope(e, scope):
                continue
            slot = found.setdefault(e.member_id, {})
            if e.is_after(slot.get(e.direction)):
                slot[e.direction] = e
        return {m: LatestEvents(last_in=p.get(Direction.IN), last_out=p.get(Direction.OUT)) for m, p in found.items()}

    def list_sign_ins(self, *, activity_id, since=None, until=None, member_ids=None, location_ids=None, limit, offset=0):
        items = [
            e
            for e in self.rows
            if e.activity_id == activity_id
            and e.direction is Direction.IN
            and (since is None or e.timestamp >= since)
            and (until is None or e.timestamp < until)
            and (member_ids is None or e.member_id in member_ids)
            and (location_ids is None or e.location_id in location_ids)
        ]
        items.sort(key=lambda e: e.order_key, reverse=True)
        return items[offset : offset + limit]

    def next_event(self, *, after, direction, location_id=None) -> Optional[TimecardEvent]:
        items = [
            e
            for e in self.rows
            if e.activity_id == after.activity_id
            and e.member_id == after.member_id
            and e.direction is direction
            and e.is_after(after)
            and (location_id is None or e.location_id == location_id)
        ]
        return min(items, key=lambda e: e.order_key) if items else None

    def member_ids_with_events(self, activity_id):
        return sorted({e.member_id for e in self.rows if e.activity_id == activity_id})

    def location_ids_with_events(self, activity_id):
        return sorted({e.location_id for e in self.rows if e.activity_id == activity_id})


class InMemoryLocations:
    def __init__(self):
        self.rows: dict[int, Location] = {}
        self._id = 0

    def get_by_id(self, location_id):
        return self.rows.get(int(location_id))

    def list_for_activity(self, activity_id):
        return [loc for loc in sorted(self.rows.values(), key=lambda l: l.location_id) if loc.activity_id == activity_id]

    def create(self, *, activity_id, name) -> int:
        self._id += 1
        self.rows[self._id] = Location(location_id=self._id, activity_id=int(activity_id), name=name)
        return self._id

    def rename(self, *, location_id, name) -> bool:
        loc = self.rows.get(int(location_id))
        if not loc:
            return False
        self.rows[loc.location_id] = Location(location_id=loc.location_id, activity_id=loc.activity_id, name=name)
        return True

    def delete(self, location_id) -> bool:
        return self.rows.pop(int(location_id), None) is not None


class InMemoryActivities:
    def __init__(self, locations: InMemoryLocations, events: InMemoryEvents):
        self.rows: dict[int, Activity] = {}
        self._id = 0
        self._locations = locations
        self._events = events

    def get_by_id(self, activity_id):
        return self.rows.get(int(activity_id))

    def list_for_course(self, course_id):
        return [a for a in self.rows.values() if a.course_id == course_id]

    def create(self, *, course_id, name, intro, settings) -> int:
        self._id += 1
        self.rows[self._id] = Activity(activity_id=self._id, course_id=course_id, name=name, intro=intro, settings=settings)
        return self._id

    def update(self, *, activity_id, name, intro, settings) -> bool:
        current = self.rows.get(int(activity_id))
        if not current:
            return False
        self.rows[current.activity_id] = Activity(
            activity_id=current.activity_id, course_id=current.course_id, name=name, intro=intro, settings=settings
        )
        return True

    def delete(self, activity_id) -> bool:
        activity_id = int(activity_id)
        self._events.rows = [e for e in self._events.rows if e.activity_id != activity_id]
        for loc in self._locations.list_for_activity(activity_id):
            self._locations.delete(loc.location_id)
        return self.rows.pop(activity_id, None) is not None


class InMemoryMembers:
    def __init__(self):
        self.members: dict[int, Member] = {}
        self.enrolments: dict[int, list[int]] = {}
        self.groups: dict[int, Group] = {}
        self.group_members: dict[int, set[int]] = {}

    def add(self, member: Member, *, course_id: int = 1, groups: Iterable[int] = ()) -> Member:
        self.members[member.member_id] = member
        self.enrolments.setdefault(course_id, []).append(member.member_id)
        for group_id in groups:
            self.group_members.setdefault(group_id, set()).add(member.member_id)
        return member

    def add_group(self, group: Group) -> Group:
        self.groups[group.group_id] = group
        return group

    def get_by_id(self, member_id):
        return self.members.get(int(member_id))

    def get_many(self, member_ids):
        return [self.members[i] for i in member_ids if i in self.members]

    def get_eligible_members(self, *, course_id, group_id=None, grouping_id=None):
        ids = self.enrolments.get(course_id, [])
        if group_id:
            ids = [i for i in ids if i in self.group_members.get(group_id, set())]
        elif grouping_id:
            in_grouping = {
                m
                for gid, g in self.groups.items()
                if g.grouping_id == grouping_id
                for m in self.group_members.get(gid, set())
            }
            ids = [i for i in ids if i in in_grouping]
        return sorted((self.members[i] for i in ids), key=lambda m: (m.last_name, m.member_id))

    def list_groups(self, *, course_id, grouping_id=None):
        return [
            g
            for g in self.groups.values()
            if g.course_id == course_id and (grouping_id is None or g.grouping_id == grouping_id)
        ]

    def groups_for_members(self, *, course_id, member_ids):
        out: dict[int, list[str]] = {}
        for gid, ids in sorted(self.group_members.items()):
            group = self.groups.get(gid)
            if not group or group.course_id != course_id:
                continue
            for m in member_ids:
                if m in ids:
                    out.setdefault(m, []).append(group.name)
        return out

    def member_ids_enrolled_in(self, course_ids):
        return {m for c in course_ids for m in self.enrolments.get(c, [])}


@dataclass
class World:
    events: InMemoryEvents
    locations: InMemoryLocations
    activities: InMemoryActivities
    members: InMemoryMembers
    container: Container

    def activity(self, *, with_location: bool = True, course_id: int = 1, **settings) -> Activity:
        settings.setdefault("timecard_enabled", True)
        activity_id = self.activities.create(
            course_id=course_id, name="Front desk", intro="", settings=ActivitySettings(**settings)
        )
        if with_location:
            self.locations.create(activity_id=activity_id, name="Main hall")
        return self.activities.get_by_id(activity_id)


@pytest.fixture
def fixed_now() -> int:
    # 2026-02-02 10:00 UTC, a Monday
    return utc_ts(2026, 2, 2, 10, 0)


@pytest.fixture
def world() -> World:
    events = InMemoryEvents()
    locations = InMemoryLocations()
    activities = InMemoryActivities(locations, events)
    members = InMemoryMembers()

    members.add(Member(member_id=1, first_name="Ada", last_name="Lovelace", idnumber="1001", email="ada@example.org", username="ada"))
    members.add(Member(member_id=2, first_name="Alan", last_name="Turing", idnumber="1002", email="alan@example.org", username="alan"))
    members.add(Member(member_id=3, first_name="Grace", last_name="Hopper", idnumber="1003", email="grace@example.org", username="grace"))

    container = assemble_container(
        activities_repo=activities,
        locations_repo=locations,
        members_repo=members,
        events_repo=events,
        tz_name="UTC",
    )
    return World(events=events, locations=locations, activities=activities, members=members, container=container)


@pytest.fixture
def at():
    """Build UTC unix timestamps: ``at(2026, 2, 2, 9, 30)``."""
    return utc_ts
