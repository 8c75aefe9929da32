from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import abort, jsonify, session

from ..activities.model import Activity
from ..core.enums import Capability, Role
from ..core.exceptions import InvalidReference, PermissionDenied
from .permissions import require


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    """The host application signs users in and sets ``user_id``/``role``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def load_activity(container, activity_id: int) -> Activity:
    try:
        return container.activity_service.get(activity_id)
    except InvalidReference:
        abort(404)


def can(container, activity: Activity, capability: Capability) -> bool:
    return container.permissions.has(
        user_id=current_user_id(),
        role=current_role(),
        activity=activity,
        capability=capability,
    )


def require_capability(container, activity: Activity, capability: Capability) -> None:
    try:
        require(
            container.permissions,
            user_id=current_user_id(),
            role=current_role(),
            activity=activity,
            capability=capability,
        )
    except PermissionDenied:
        abort(403)


def optional_int(value) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None
