from __future__ import annotations

from typing import Mapping, Optional, Protocol

from ..activities.model import Activity
from ..core.enums import Capability, Role
from ..core.exceptions import PermissionDenied

DEFAULT_ROLE_CAPABILITIES: Mapping[Role, frozenset[Capability]] = {
    Role.MANAGER: frozenset(Capability),
    Role.TEACHER: frozenset(Capability),
    Role.STUDENT: frozenset({Capability.VIEW, Capability.SIGN_SELF}),
    Role.KIOSK: frozenset({Capability.VIEW, Capability.SIGN_SELF}),
}


class PermissionChecker(Protocol):
    """Capability checks supplied by the host application."""

    def has(self, *, user_id: int, role: Optional[Role], activity: Activity, capability: Capability) -> bool:
        raise NotImplementedError


class RolePermissions(PermissionChecker):
    """Default checker: a fixed role -> capabilities table."""

    def __init__(self, table: Optional[Mapping[Role, frozenset[Capability]]] = None):
        self._table = dict(table or DEFAULT_ROLE_CAPABILITIES)

    def has(self, *, user_id: int, role: Optional[Role], activity: Activity, capability: Capability) -> bool:
        if role is None:
            return False
        return capability in self._table.get(role, frozenset())


def require(
    checker: PermissionChecker,
    *,
    user_id: int,
    role: Optional[Role],
    activity: Activity,
    capability: Capability,
) -> None:
    if not checker.has(user_id=user_id, role=role, activity=activity, capability=capability):
        raise PermissionDenied(f"Missing capability: {capability.value}")
