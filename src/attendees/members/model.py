from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Member:
    """A person who can be signed in or out.

    Profile fields double as kiosk lookup fields (see ``lookup_value``).
    """

    member_id: int
    first_name: str
    last_name: str
    idnumber: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    phone1: Optional[str] = None
    phone2: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def lookup_value(self, field_name: str) -> Optional[str]:
        return getattr(self, field_name, None)


LOOKUP_FIELDS = ("idnumber", "email", "username", "phone1", "phone2")


@dataclass(frozen=True)
class Group:
    group_id: int
    course_id: int
    name: str
    grouping_id: Optional[int] = None
