from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import Group, Member


class MemberRepository(Protocol):
    """Membership/profile collaborator.

    Enrolment and group resolution belong to the host system; the engine only
    reads through this interface.
    """

    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def get_eligible_members(
        self,
        *,
        course_id: int,
        group_id: Optional[int] = None,
        grouping_id: Optional[int] = None,
    ) -> Sequence[Member]:
        """Members allowed to sign in/out, ordered by last name ascending."""

        raise NotImplementedError

    def list_groups(self, *, course_id: int, grouping_id: Optional[int] = None) -> Sequence[Group]:
        raise NotImplementedError

    def groups_for_members(self, *, course_id: int, member_ids: Iterable[int]) -> Mapping[int, Sequence[str]]:
        raise NotImplementedError

    def member_ids_enrolled_in(self, course_ids: Iterable[int]) -> set[int]:
        raise NotImplementedError

    def get_many(self, member_ids: Iterable[int]) -> Sequence[Member]:
        raise NotImplementedError
