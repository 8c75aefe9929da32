from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.permissions import PermissionChecker, RolePermissions
from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .core.constants import DEFAULT_TIMEZONE, HISTORY_PAGE_SIZE, REFRESH_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .locations.service import LocationService
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .timecard.history import HistoryService
from .timecard.lookup import LookupEngine
from .timecard.mysql_timecard_repository import MySQLTimecardRepository
from .timecard.repository import EventStore
from .timecard.roster import RosterService
from .timecard.service import TimecardService
from .timecard.status import StatusEngine


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    activities_repo: ActivityRepository
    locations_repo: LocationRepository
    members_repo: MemberRepository
    events_repo: EventStore

    activity_service: ActivityService
    location_service: LocationService
    status_engine: StatusEngine
    timecard_service: TimecardService
    lookup_engine: LookupEngine
    roster_service: RosterService
    history_service: HistoryService
    permissions: PermissionChecker

    tz_name: str = DEFAULT_TIMEZONE
    refresh_seconds: int = REFRESH_SECONDS


def assemble_container(
    *,
    activities_repo: ActivityRepository,
    locations_repo: LocationRepository,
    members_repo: MemberRepository,
    events_repo: EventStore,
    permissions: Optional[PermissionChecker] = None,
    conn: Optional[DatabaseConnection] = None,
    tz_name: str = DEFAULT_TIMEZONE,
    page_size: int = HISTORY_PAGE_SIZE,
    refresh_seconds: int = REFRESH_SECONDS,
) -> Container:
    activity_service = ActivityService(activities_repo, locations_repo)
    location_service = LocationService(locations_repo)
    status_engine = StatusEngine(events_repo, tz_name=tz_name)
    timecard_service = TimecardService(events_repo, members_repo, location_service, status_engine)
    lookup_engine = LookupEngine(members_repo)
    roster_service = RosterService(members_repo, status_engine)
    history_service = HistoryService(events_repo, members_repo, locations_repo, tz_name=tz_name, page_size=page_size)

    return Container(
        conn=conn,
        activities_repo=activities_repo,
        locations_repo=locations_repo,
        members_repo=members_repo,
        events_repo=events_repo,
        activity_service=activity_service,
        location_service=location_service,
        status_engine=status_engine,
        timecard_service=timecard_service,
        lookup_engine=lookup_engine,
        roster_service=roster_service,
        history_service=history_service,
        permissions=permissions or RolePermissions(),
        tz_name=tz_name,
        refresh_seconds=int(refresh_seconds),
    )


def build_container(
    *,
    db_config: dict,
    tz_name: str = DEFAULT_TIMEZONE,
    page_size: int = HISTORY_PAGE_SIZE,
    refresh_seconds: int = REFRESH_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        activities_repo=MySQLActivityRepository(conn),
        locations_repo=MySQLLocationRepository(conn),
        members_repo=MySQLMemberRepository(conn),
        events_repo=MySQLTimecardRepository(conn),
        conn=conn,
        tz_name=tz_name,
        page_size=page_size,
        refresh_seconds=refresh_seconds,
    )
