from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Location


class LocationRepository(Protocol):
    def get_by_id(self, location_id: int) -> Optional[Location]:
        raise NotImplementedError

    def list_for_activity(self, activity_id: int) -> Sequence[Location]:
        """Locations of an activity, oldest first."""

        raise NotImplementedError

    def create(self, *, activity_id: int, name: str) -> int:
        raise NotImplementedError

    def rename(self, *, location_id: int, name: str) -> bool:
        raise NotImplementedError

    def delete(self, location_id: int) -> bool:
        raise NotImplementedError
