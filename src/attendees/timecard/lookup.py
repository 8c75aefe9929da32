from __future__ import annotations

import logging
from typing import Optional

from ..activities.model import Activity
from ..core.exceptions import CodeNotFound, EmptyInput
from ..members.repository import MemberRepository

logger = logging.getLogger(__name__)


class LookupEngine:
    """Kiosk identification: resolve a typed or scanned code to one member."""

    def __init__(self, members: MemberRepository):
        self._members = members

    def lookup(self, activity: Activity, code: Optional[str], *, group_id: Optional[int] = None) -> int:
        code = (code or "").strip()
        if not code:
            raise EmptyInput("No code entered")

        fields = activity.settings.effective_search_fields
        candidates = self._members.get_eligible_members(
            course_id=activity.course_id,
            group_id=group_id,
            grouping_id=activity.settings.grouping_id,
        )

        matched = {
            m.member_id
            for m in candidates
            if any(m.lookup_value(f) == code for f in fields)
        }

        if len(matched) != 1:
            # Ambiguous codes are rejected rather than guessed.
            logger.warning(
                "Kiosk code rejected for activity %s: %d matching members", activity.activity_id, len(matched)
            )
            raise CodeNotFound("No User found")

        return matched.pop()
