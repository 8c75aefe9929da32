from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, replace
from typing import Optional

from ..core.constants import DEFAULT_SEARCH_FIELDS
from ..core.enums import RosterTab


@dataclass(frozen=True)
class ActivitySettings:
    """Typed per-activity policy.

    Stored as one JSON column; ``to_json``/``from_json`` are only used by the
    repository layer.
    """

    timecard_enabled: bool = False
    auto_sign_out: bool = True
    separate_locations: bool = False
    location_locked: bool = False
    search_fields: tuple[str, ...] = ()
    kiosk_mode: bool = False
    kiosk_buttons: bool = False
    show_roster: bool = False
    show_groups: bool = True
    lock_view: bool = False
    default_view: RosterTab = RosterTab.ALL
    print_intro: bool = True
    grouping_id: Optional[int] = None

    @property
    def effective_search_fields(self) -> tuple[str, ...]:
        return self.search_fields or DEFAULT_SEARCH_FIELDS

    def with_changes(self, **changes) -> "ActivitySettings":
        return replace(self, **changes)

    def to_json(self) -> str:
        data = asdict(self)
        data["search_fields"] = list(self.search_fields)
        data["default_view"] = self.default_view.value
        return json.dumps(data, sort_keys=True)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "ActivitySettings":
        if not raw:
            return cls()
        data = json.loads(raw)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "search_fields" in known:
            known["search_fields"] = tuple(known["search_fields"] or ())
        if "default_view" in known:
            known["default_view"] = RosterTab(known["default_view"])
        return cls(**known)


@dataclass(frozen=True)
class Activity:
    """One configured attendance-tracking instance inside a course."""

    activity_id: int
    course_id: int
    name: str
    intro: str = ""
    settings: ActivitySettings = field(default_factory=ActivitySettings)
