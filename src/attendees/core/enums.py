from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles the host application puts into the session."""

    MANAGER = "manager"
    TEACHER = "teacher"
    STUDENT = "student"
    KIOSK = "kiosk"


class Capability(str, Enum):
    VIEW = "view"
    SIGN_SELF = "sign_self"
    SIGN_OTHERS = "sign_others"
    VIEW_ROSTERS = "view_rosters"
    VIEW_HISTORY = "view_history"
    MANAGE_LOCATIONS = "manage_locations"


class Direction(str, Enum):
    """Direction of a timecard event, stored as-is in the database."""

    IN = "in"
    OUT = "out"

    @property
    def opposite(self) -> "Direction":
        return Direction.OUT if self is Direction.IN else Direction.IN


class RosterTab(str, Enum):
    ALL = "all"
    ONLY_IN = "onlyin"
    ONLY_OUT = "onlyout"


class ViewMode(str, Enum):
    ROSTER = "roster"
    KIOSK = "kiosk"
    HISTORY = "history"
    LOCATIONS = "locations"


class SessionState(str, Enum):
    """How a reconstructed session ended."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    NO_SIGN_OUT = "NO_SIGN_OUT"
