from __future__ import annotations

import logging
from typing import Optional

from ..activities.model import Activity
from ..common.datetime_utils import now_timestamp
from ..common.locks import KeyedLock
from ..core.enums import Direction
from ..core.exceptions import InvalidReference, ValidationError
from ..locations.service import LocationService
from ..members.repository import MemberRepository
from .model import ToggleResult
from .repository import EventStore
from .status import StatusEngine

logger = logging.getLogger(__name__)

_MESSAGES = {
    Direction.IN: "{name} has been signed in.",
    Direction.OUT: "{name} has been signed out.",
}


class TimecardService:
    """Use case: sign a member in or out of an activity."""

    def __init__(
        self,
        events: EventStore,
        members: MemberRepository,
        locations: LocationService,
        engine: StatusEngine,
        *,
        locks: Optional[KeyedLock] = None,
    ):
        self._events = events
        self._members = members
        self._locations = locations
        self._engine = engine
        self._locks = locks or KeyedLock()

    def sign_in_or_out(
        self,
        member_id: int,
        activity: Activity,
        *,
        now: Optional[int] = None,
        origin_address: str = "",
        location_id: Optional[int] = None,
    ) -> ToggleResult:
        if not activity.settings.timecard_enabled:
            raise ValidationError("Sign in/out is not enabled for this activity")

        member = self._members.get_by_id(int(member_id))
        if not member:
            raise InvalidReference(f"Member {member_id} not found")

        location = self._locations.resolve(activity, location_id)

        with self._locks.hold((member.member_id, activity.activity_id)):
            # Read and append under one lock so a double submit cannot write in→in.
            stamp = now if now is not None else now_timestamp()
            current = self._engine.current_status(
                member.member_id,
                activity,
                location_id=location.location_id,
                origin_address=origin_address,
                now=stamp,
            )
            direction = current.opposite
            event = self._events.append(
                member_id=member.member_id,
                activity_id=activity.activity_id,
                location_id=location.location_id,
                timestamp=stamp,
                direction=direction,
                origin_address=origin_address or "",
            )

        logger.info(
            "Member %s signed %s of activity %s at location %s (event %s, origin %s)",
            member.member_id,
            direction.value,
            activity.activity_id,
            location.location_id,
            event.event_id,
            origin_address or "-",
        )
        return ToggleResult(
            direction=direction,
            message=_MESSAGES[direction].format(name=member.full_name),
            event=event,
        )
