from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_known, require_max_length, require_non_empty
from ..core.constants import DEFAULT_LOCATION_NAME
from ..core.enums import RosterTab
from ..core.exceptions import InvalidReference, ValidationError
from ..locations.repository import LocationRepository
from ..members.model import LOOKUP_FIELDS
from .model import Activity, ActivitySettings
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Use case: create, configure and remove attendance activities."""

    def __init__(self, activities: ActivityRepository, locations: LocationRepository):
        self._activities = activities
        self._locations = locations

    def get(self, activity_id: int) -> Activity:
        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise InvalidReference(f"Activity {activity_id} not found")
        return activity

    def list_for_course(self, course_id: int) -> Sequence[Activity]:
        return self._activities.list_for_course(int(course_id))

    def create(
        self,
        *,
        course_id: int,
        name: str,
        intro: str = "",
        settings: Optional[ActivitySettings] = None,
    ) -> int:
        name = self._clean_name(name)
        settings = self._clean_settings(settings or ActivitySettings())

        activity_id = self._activities.create(course_id=int(course_id), name=name, intro=intro or "", settings=settings)
        logger.info("Created activity %s (%r) in course %s", activity_id, name, course_id)

        if settings.timecard_enabled:
            self._ensure_location(activity_id)
        return activity_id

    def update(
        self,
        activity_id: int,
        *,
        name: Optional[str] = None,
        intro: Optional[str] = None,
        settings: Optional[ActivitySettings] = None,
    ) -> Activity:
        current = self.get(activity_id)
        name = self._clean_name(name) if name is not None else current.name
        intro = intro if intro is not None else current.intro
        settings = self._clean_settings(settings) if settings is not None else current.settings

        self._activities.update(activity_id=current.activity_id, name=name, intro=intro, settings=settings)
        if settings.timecard_enabled:
            self._ensure_location(current.activity_id)

        logger.info("Updated activity %s", current.activity_id)
        return Activity(
            activity_id=current.activity_id,
            course_id=current.course_id,
            name=name,
            intro=intro,
            settings=settings,
        )

    def delete(self, activity_id: int) -> None:
        activity = self.get(activity_id)
        self._activities.delete(activity.activity_id)
        logger.info("Deleted activity %s with its locations and timecard events", activity.activity_id)

    def _ensure_location(self, activity_id: int) -> None:
        # Sign in/out always needs somewhere to record events against.
        if not self._locations.list_for_activity(activity_id):
            self._locations.create(activity_id=activity_id, name=DEFAULT_LOCATION_NAME)
            logger.info("Created default location for activity %s", activity_id)

    @staticmethod
    def _clean_name(name: str) -> str:
        return require_max_length(require_non_empty(name, "Name"), "Name", 255)

    @staticmethod
    def _clean_settings(settings: ActivitySettings) -> ActivitySettings:
        fields = require_known(settings.search_fields, LOOKUP_FIELDS, "Search fields")
        try:
            default_view = RosterTab(settings.default_view)
        except ValueError:
            raise ValidationError(f"Unknown roster view {settings.default_view!r}")
        return settings.with_changes(search_fields=fields, default_view=default_view)
