from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import Direction, SessionState


@dataclass(frozen=True)
class TimecardEvent:
    """One sign-in or sign-out. Never updated once written."""

    event_id: int
    member_id: int
    activity_id: int
    location_id: int
    timestamp: int
    direction: Direction
    origin_address: str = ""

    @property
    def order_key(self) -> tuple[int, int]:
        # Same-second events fall back to insertion order.
        return (self.timestamp, self.event_id)

    def is_after(self, other: Optional["TimecardEvent"]) -> bool:
        return other is None or self.order_key > other.order_key


@dataclass(frozen=True)
class StatusScope:
    """Which events count towards a member's status.

    ``location_id`` narrows to one location, ``origin_address`` to one
    device/network address; ``None`` means no restriction.
    """

    location_id: Optional[int] = None
    origin_address: Optional[str] = None


@dataclass(frozen=True)
class LatestEvents:
    last_in: Optional[TimecardEvent] = None
    last_out: Optional[TimecardEvent] = None


@dataclass(frozen=True)
class ToggleResult:
    direction: Direction
    message: str
    event: TimecardEvent


@dataclass(frozen=True)
class HistoryFilters:
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    member_ids: tuple[int, ...] = ()
    location_ids: tuple[int, ...] = ()
    course_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class Session:
    """A sign-in paired with whatever ended it."""

    member_id: int
    member_name: str
    location_id: int
    location_name: str
    sign_in_time: int
    sign_out_time: Optional[int]
    duration_seconds: Optional[int]
    state: SessionState

    @property
    def anomaly(self) -> bool:
        return self.state is SessionState.NO_SIGN_OUT


@dataclass(frozen=True)
class HistoryPage:
    sessions: list[Session] = field(default_factory=list)
    page: int = 0
    has_next: bool = False
