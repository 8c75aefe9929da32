from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.web import json_error, load_activity, login_required, require_capability
from ..container import Container
from ..core.enums import Capability
from ..core.exceptions import CannotDeleteLastLocation, InvalidReference, ValidationError


def register(app: Flask, container: Container) -> None:
    def _listing(activity):
        return [
            {"location_id": loc.location_id, "name": loc.name}
            for loc in container.location_service.list_locations(activity)
        ]

    @app.route("/activities/<int:activity_id>/locations", methods=["GET", "POST"], endpoint="locations")
    @login_required
    def locations(activity_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.MANAGE_LOCATIONS)

        if request.method == "POST":
            try:
                location_id = container.location_service.add(activity, request.form.get("name", ""))
            except ValidationError as e:
                return json_error(str(e), 400)
            return jsonify({"success": True, "location_id": location_id, "locations": _listing(activity)}), 201

        return jsonify({"locations": _listing(activity)})

    @app.route(
        "/activities/<int:activity_id>/locations/<int:location_id>/rename",
        methods=["POST"],
        endpoint="rename_location",
    )
    @login_required
    def rename_location(activity_id: int, location_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.MANAGE_LOCATIONS)

        try:
            container.location_service.rename(activity, location_id, request.form.get("name", ""))
        except InvalidReference as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"success": True, "locations": _listing(activity)})

    @app.route(
        "/activities/<int:activity_id>/locations/<int:location_id>/delete",
        methods=["POST"],
        endpoint="delete_location",
    )
    @login_required
    def delete_location(activity_id: int, location_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.MANAGE_LOCATIONS)

        try:
            container.location_service.delete(activity, location_id)
        except InvalidReference as e:
            return json_error(str(e), 404)
        except CannotDeleteLastLocation as e:
            return json_error(str(e), 409)
        return jsonify({"success": True, "locations": _listing(activity)})
