from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Direction
from .model import LatestEvents, StatusScope, TimecardEvent


class EventStore(Protocol):
    """Append-only log of timecard events.

    Ordering everywhere is ``(timestamp, event_id)``.
    """

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
        raise NotImplementedError

    def latest_events(self, *, member_id: int, activity_id: int, scope: StatusScope) -> LatestEvents:
        """Latest "in" and latest "out" of one member within ``scope``."""

        raise NotImplementedError

    def latest_events_for_members(
        self,
        *,
        activity_id: int,
        member_ids: Iterable[int],
        scope: StatusScope,
    ) -> Mapping[int, LatestEvents]:
        """Bulk form of ``latest_events``; members without events may be absent."""

        raise NotImplementedError

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
        """Sign-in events, newest first. ``until`` is exclusive."""

        raise NotImplementedError

    def next_event(
        self,
        *,
        after: TimecardEvent,
        direction: Direction,
        location_id: Optional[int] = None,
    ) -> Optional[TimecardEvent]:
        """First event of ``direction`` for the same member and activity after ``after``."""

        raise NotImplementedError

    def member_ids_with_events(self, activity_id: int) -> Sequence[int]:
        raise NotImplementedError

    def location_ids_with_events(self, activity_id: int) -> Sequence[int]:
        raise NotImplementedError
