from __future__ import annotations

from typing import Optional

from ..activities.model import Activity
from ..common.datetime_utils import format_duration, format_timestamp, local_date, local_day_span, now_timestamp
from ..core.constants import HISTORY_PAGE_SIZE
from ..core.enums import Direction, SessionState
from ..locations.repository import LocationRepository
from ..members.repository import MemberRepository
from .model import HistoryFilters, HistoryPage, Session, TimecardEvent
from .repository import EventStore


def pair_session(
    sign_in: TimecardEvent,
    next_in: Optional[TimecardEvent],
    next_out: Optional[TimecardEvent],
    *,
    auto_sign_out: bool,
    now: int,
    tz_name: str,
) -> tuple[SessionState, Optional[int], Optional[int]]:
    """Work out how a sign-in ended.

    Returns ``(state, sign_out_time, duration_seconds)``. A later sign-in that
    lands before the next sign-out means the member was never signed out of
    this session.
    """

    if next_out is not None:
        if next_in is None or not next_out.is_after(next_in):
            return SessionState.CLOSED, next_out.timestamp, next_out.timestamp - sign_in.timestamp
        return SessionState.NO_SIGN_OUT, None, None

    if local_date(sign_in.timestamp, tz_name) == local_date(now, tz_name):
        return SessionState.OPEN, None, now - sign_in.timestamp
    if not auto_sign_out and next_in is None:
        return SessionState.OPEN, None, now - sign_in.timestamp
    return SessionState.NO_SIGN_OUT, None, None


class HistoryService:
    """Rebuilds sign-in sessions from the event log for the history view."""

    def __init__(
        self,
        events: EventStore,
        members: MemberRepository,
        locations: LocationRepository,
        *,
        tz_name: str,
        page_size: int = HISTORY_PAGE_SIZE,
    ):
        self._events = events
        self._members = members
        self._locations = locations
        self._tz_name = tz_name
        self._page_size = int(page_size)

    @property
    def page_size(self) -> int:
        return self._page_size

    def history(
        self,
        activity: Activity,
        filters: Optional[HistoryFilters] = None,
        *,
        page: int = 0,
        now: Optional[int] = None,
    ) -> HistoryPage:
        filters = filters or HistoryFilters()
        now = now if now is not None else now_timestamp()
        page = max(int(page), 0)

        since, until = local_day_span(filters.from_date, filters.to_date, self._tz_name)
        sign_ins = list(
            self._events.list_sign_ins(
                activity_id=activity.activity_id,
                since=since,
                until=until,
                member_ids=self._member_filter(filters),
                location_ids=list(filters.location_ids) if filters.location_ids else None,
                limit=self._page_size + 1,
                offset=page * self._page_size,
            )
        )
        has_next = len(sign_ins) > self._page_size
        sign_ins = sign_ins[: self._page_size]

        names = {m.member_id: m.full_name for m in self._members.get_many({e.member_id for e in sign_ins})}
        places = {loc.location_id: loc.name for loc in self._locations.list_for_activity(activity.activity_id)}

        sessions = []
        for sign_in in sign_ins:
            scope = sign_in.location_id if activity.settings.separate_locations else None
            next_in = self._events.next_event(after=sign_in, direction=Direction.IN, location_id=scope)
            next_out = self._events.next_event(after=sign_in, direction=Direction.OUT, location_id=scope)
            state, sign_out_time, duration = pair_session(
                sign_in,
                next_in,
                next_out,
                auto_sign_out=activity.settings.auto_sign_out,
                now=now,
                tz_name=self._tz_name,
            )
            sessions.append(
                Session(
                    member_id=sign_in.member_id,
                    member_name=names.get(sign_in.member_id, f"#{sign_in.member_id}"),
                    location_id=sign_in.location_id,
                    location_name=places.get(sign_in.location_id, "-"),
                    sign_in_time=sign_in.timestamp,
                    sign_out_time=sign_out_time,
                    duration_seconds=duration,
                    state=state,
                )
            )

        return HistoryPage(sessions=sessions, page=page, has_next=has_next)

    def to_rows(self, history: HistoryPage) -> list[dict]:
        """Flatten sessions into display rows (also used for the CSV export)."""

        return [
            {
                "member_id": s.member_id,
                "full_name": s.member_name,
                "location": s.location_name,
                "sign_in": format_timestamp(s.sign_in_time, self._tz_name),
                "sign_out": format_timestamp(s.sign_out_time, self._tz_name) if s.sign_out_time is not None else "-",
                "duration": format_duration(s.duration_seconds) if s.duration_seconds is not None else "-",
                "status": s.state.value,
                "anomaly": s.anomaly,
            }
            for s in history.sessions
        ]

    def filter_options(self, activity: Activity) -> dict:
        member_ids = self._events.member_ids_with_events(activity.activity_id)
        used = set(self._events.location_ids_with_events(activity.activity_id))
        return {
            "members": [{"member_id": m.member_id, "full_name": m.full_name} for m in self._members.get_many(member_ids)],
            "locations": [
                {"location_id": loc.location_id, "name": loc.name}
                for loc in self._locations.list_for_activity(activity.activity_id)
                if loc.location_id in used
            ],
        }

    def _member_filter(self, filters: HistoryFilters) -> Optional[list[int]]:
        if not filters.member_ids and not filters.course_ids:
            return None

        ids: Optional[set[int]] = set(filters.member_ids) if filters.member_ids else None
        if filters.course_ids:
            enrolled = self._members.member_ids_enrolled_in(filters.course_ids)
            ids = enrolled if ids is None else ids & enrolled
        return sorted(ids)
