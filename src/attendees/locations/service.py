from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..activities.model import Activity
from ..common.validators import require_max_length, require_non_empty
from ..core.exceptions import CannotDeleteLastLocation, InvalidReference, NoLocationConfigured
from .model import Location
from .repository import LocationRepository

logger = logging.getLogger(__name__)


class LocationService:
    """Use case: manage the sign in/out locations of an activity."""

    def __init__(self, locations: LocationRepository):
        self._locations = locations

    def list_locations(self, activity: Activity) -> Sequence[Location]:
        return self._locations.list_for_activity(activity.activity_id)

    def get(self, activity: Activity, location_id: int) -> Location:
        location = self._locations.get_by_id(int(location_id))
        if not location or location.activity_id != activity.activity_id:
            raise InvalidReference(f"Location {location_id} not found")
        return location

    def add(self, activity: Activity, name: str) -> int:
        name = require_max_length(require_non_empty(name, "Location name"), "Location name", 255)
        location_id = self._locations.create(activity_id=activity.activity_id, name=name)
        logger.info("Added location %s (%r) to activity %s", location_id, name, activity.activity_id)
        return location_id

    def rename(self, activity: Activity, location_id: int, name: str) -> None:
        name = require_max_length(require_non_empty(name, "Location name"), "Location name", 255)
        location = self.get(activity, location_id)
        self._locations.rename(location_id=location.location_id, name=name)
        logger.info("Renamed location %s to %r", location.location_id, name)

    def delete(self, activity: Activity, location_id: int) -> None:
        location = self.get(activity, location_id)
        if len(self._locations.list_for_activity(activity.activity_id)) <= 1:
            logger.warning("Refused to delete last location %s of activity %s", location_id, activity.activity_id)
            raise CannotDeleteLastLocation("The last location of an activity cannot be deleted")
        self._locations.delete(location.location_id)
        logger.info("Deleted location %s from activity %s", location.location_id, activity.activity_id)

    def resolve(self, activity: Activity, location_id: Optional[int] = None) -> Location:
        """Location a sign in/out is recorded against.

        An explicit id must belong to the activity; otherwise the first
        location is used.
        """

        if location_id:
            return self.get(activity, location_id)

        locations = self._locations.list_for_activity(activity.activity_id)
        if not locations:
            raise NoLocationConfigured("No sign in/out location is configured for this activity")
        return locations[0]
