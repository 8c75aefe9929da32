from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Activity, ActivitySettings


class ActivityRepository(Protocol):
    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Activity]:
        raise NotImplementedError

    def create(self, *, course_id: int, name: str, intro: str, settings: ActivitySettings) -> int:
        raise NotImplementedError

    def update(self, *, activity_id: int, name: str, intro: str, settings: ActivitySettings) -> bool:
        raise NotImplementedError

    def delete(self, activity_id: int) -> bool:
        """Delete the activity together with its locations and timecard events."""

        raise NotImplementedError
