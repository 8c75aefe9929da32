from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..activities.model import Activity
from ..common.datetime_utils import day_boundary, now_timestamp
from ..core.enums import Direction
from .model import LatestEvents, StatusScope
from .repository import EventStore

logger = logging.getLogger(__name__)


def evaluate_status(latest: LatestEvents, *, auto_sign_out: bool, boundary: int) -> Direction:
    """Decide in/out from the latest "in" and "out" events.

    With ``auto_sign_out`` only activity since ``boundary`` (start of today)
    can keep a member in; without it the most recent action wins and a member
    who never signed out stays in.
    """

    last_in, last_out = latest.last_in, latest.last_out
    if last_in is None:
        return Direction.OUT

    out_after_in = last_out is not None and last_out.is_after(last_in)

    if auto_sign_out:
        if out_after_in and last_out.timestamp >= boundary:
            # Signed out today.
            return Direction.OUT
        if last_in.timestamp >= boundary and not out_after_in:
            return Direction.IN
        # Stale from a previous day, or anything else.
        return Direction.OUT

    if out_after_in:
        return Direction.OUT
    return Direction.IN


class StatusEngine:
    """Current in/out status of members, always recomputed from the event log."""

    def __init__(self, events: EventStore, *, tz_name: str):
        self._events = events
        self._tz_name = tz_name

    @property
    def tz_name(self) -> str:
        return self._tz_name

    def boundary(self, now: int) -> int:
        return day_boundary(now, self._tz_name)

    @staticmethod
    def scope_for(
        activity: Activity,
        *,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
    ) -> StatusScope:
        settings = activity.settings
        return StatusScope(
            location_id=int(location_id) if settings.separate_locations and location_id else None,
            origin_address=origin_address if settings.location_locked and origin_address is not None else None,
        )

    def evaluate(self, latest: LatestEvents, activity: Activity, *, now: int) -> Direction:
        return evaluate_status(latest, auto_sign_out=activity.settings.auto_sign_out, boundary=self.boundary(now))

    def current_status(
        self,
        member_id: int,
        activity: Activity,
        *,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Direction:
        now = now if now is not None else now_timestamp()
        scope = self.scope_for(activity, location_id=location_id, origin_address=origin_address)
        latest = self._events.latest_events(member_id=int(member_id), activity_id=activity.activity_id, scope=scope)
        status = self.evaluate(latest, activity, now=now)
        logger.debug("Member %s in activity %s is %s (scope=%s)", member_id, activity.activity_id, status.value, scope)
        return status

    def is_active(
        self,
        member_id: int,
        activity: Activity,
        *,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
        now: Optional[int] = None,
    ) -> bool:
        return (
            self.current_status(
                member_id, activity, location_id=location_id, origin_address=origin_address, now=now
            )
            is Direction.IN
        )

    def statuses(
        self,
        member_ids: Iterable[int],
        activity: Activity,
        *,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
        now: Optional[int] = None,
    ) -> dict[int, Direction]:
        """Status of many members from one bulk read, decided by ``evaluate_status``."""

        now = now if now is not None else now_timestamp()
        member_ids = [int(i) for i in member_ids]
        scope = self.scope_for(activity, location_id=location_id, origin_address=origin_address)
        latest = self._events.latest_events_for_members(
            activity_id=activity.activity_id, member_ids=member_ids, scope=scope
        )
        empty = LatestEvents()
        return {member_id: self.evaluate(latest.get(member_id, empty), activity, now=now) for member_id in member_ids}
