from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..activities.model import Activity
from ..common.datetime_utils import now_timestamp
from ..core.enums import Direction, RosterTab
from ..members.model import Member
from ..members.repository import MemberRepository
from .status import StatusEngine


@dataclass(frozen=True)
class RosterEntry:
    member_id: int
    full_name: str
    status: Direction
    groups: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "full_name": self.full_name,
            "status": self.status.value,
            "groups": list(self.groups),
        }


@dataclass(frozen=True)
class Roster:
    tab: RosterTab
    entries: list[RosterEntry] = field(default_factory=list)


def effective_tab(activity: Activity, requested: Optional[str]) -> RosterTab:
    """Tab to show: the default when locked, unknown or not requested."""

    settings = activity.settings
    if settings.lock_view or not requested:
        return settings.default_view
    try:
        return RosterTab(requested)
    except ValueError:
        return settings.default_view


class RosterService:
    """Splits a member list into signed-in and signed-out rosters."""

    def __init__(self, members: MemberRepository, engine: StatusEngine):
        self._members = members
        self._engine = engine

    def filter(
        self,
        activity: Activity,
        candidates: Sequence[Member],
        tab: RosterTab,
        *,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
        now: Optional[int] = None,
    ) -> list[Member]:
        statuses = self._statuses(activity, candidates, location_id=location_id, origin_address=origin_address, now=now)
        return self._select(candidates, statuses, tab)

    def build(
        self,
        activity: Activity,
        *,
        tab: Optional[str] = None,
        group_id: Optional[int] = None,
        location_id: Optional[int] = None,
        origin_address: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Roster:
        tab = effective_tab(activity, tab)
        candidates = self._members.get_eligible_members(
            course_id=activity.course_id,
            group_id=group_id,
            grouping_id=activity.settings.grouping_id,
        )
        statuses = self._statuses(activity, candidates, location_id=location_id, origin_address=origin_address, now=now)
        selected = self._select(candidates, statuses, tab)

        groups = {}
        if activity.settings.show_groups and selected:
            groups = self._members.groups_for_members(
                course_id=activity.course_id, member_ids=[m.member_id for m in selected]
            )

        entries = [
            RosterEntry(
                member_id=m.member_id,
                full_name=m.full_name,
                status=statuses[m.member_id],
                groups=tuple(groups.get(m.member_id, ())),
            )
            for m in selected
        ]
        return Roster(tab=tab, entries=entries)

    def _statuses(
        self,
        activity: Activity,
        candidates: Sequence[Member],
        *,
        location_id: Optional[int],
        origin_address: Optional[str],
        now: Optional[int],
    ) -> dict[int, Direction]:
        now = now if now is not None else now_timestamp()
        return self._engine.statuses(
            [m.member_id for m in candidates],
            activity,
            location_id=location_id,
            origin_address=origin_address,
            now=now,
        )

    @staticmethod
    def _select(candidates: Sequence[Member], statuses: dict[int, Direction], tab: RosterTab) -> list[Member]:
        if tab is RosterTab.ALL:
            return list(candidates)
        wanted = Direction.IN if tab is RosterTab.ONLY_IN else Direction.OUT
        return [m for m in candidates if statuses[m.member_id] is wanted]
