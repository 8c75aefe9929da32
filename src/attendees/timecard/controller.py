from __future__ import annotations

import csv
import io
import logging

from flask import Flask, abort, flash, jsonify, redirect, request, send_file, url_for
from werkzeug.exceptions import HTTPException

from ..access.web import (
    can,
    current_user_id,
    json_error,
    load_activity,
    login_required,
    optional_int,
    require_capability,
)
from ..common.datetime_utils import now_timestamp, parse_iso_date
from ..common.qr import render_qr_png
from ..container import Container
from ..core.enums import Capability, RosterTab, ViewMode
from ..core.exceptions import (
    CodeNotFound,
    EmptyInput,
    InvalidReference,
    NoLocationConfigured,
    ValidationError,
)
from .model import HistoryFilters
from .roster import effective_tab

logger = logging.getLogger(__name__)

HISTORY_CSV_FIELDS = ["member_id", "full_name", "location", "sign_in", "sign_out", "duration", "status"]


def register(app: Flask, container: Container) -> None:
    def _origin() -> str:
        return request.remote_addr or ""

    def _selected_location(activity, location_id):
        """Location the page is scoped to: the requested one, else the first."""

        if location_id:
            try:
                return container.location_service.get(activity, location_id)
            except InvalidReference:
                abort(404)
        locations = container.location_service.list_locations(activity)
        return locations[0] if locations else None

    def _roster_visible(activity) -> bool:
        return can(container, activity, Capability.VIEW_ROSTERS) or activity.settings.show_roster

    def _roster(activity, *, tab, group_id, location, now):
        return container.roster_service.build(
            activity,
            tab=tab,
            group_id=group_id,
            location_id=location.location_id if location else None,
            origin_address=_origin(),
            now=now,
        )

    def _view_mode(activity, value) -> ViewMode:
        try:
            return ViewMode(value)
        except ValueError:
            return ViewMode.KIOSK if activity.settings.kiosk_mode else ViewMode.ROSTER

    def _history_filters(args) -> HistoryFilters:
        def _ints(name):
            return tuple(i for i in (optional_int(v) for v in args.getlist(name)) if i is not None)

        try:
            from_date = parse_iso_date(args["from"]) if args.get("from") else None
            to_date = parse_iso_date(args["to"]) if args.get("to") else None
        except ValueError:
            raise ValidationError("Dates must use the YYYY-MM-DD format")

        return HistoryFilters(
            from_date=from_date,
            to_date=to_date,
            member_ids=_ints("member"),
            location_ids=_ints("location"),
            course_ids=_ints("course"),
        )

    def _history_payload(activity, args) -> dict:
        filters = _history_filters(args)
        page = container.history_service.history(activity, filters, page=optional_int(args.get("page")) or 0)
        return {
            "page": page.page,
            "has_next": page.has_next,
            "page_size": container.history_service.page_size,
            "rows": container.history_service.to_rows(page),
            "filter_options": container.history_service.filter_options(activity),
        }

    @app.route("/activities/<int:activity_id>", endpoint="view_activity")
    @login_required
    def view_activity(activity_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.VIEW)
        settings = activity.settings

        view = _view_mode(activity, request.args.get("view"))
        if view is ViewMode.HISTORY:
            require_capability(container, activity, Capability.VIEW_HISTORY)
            try:
                return jsonify({"view": view.value, "history": _history_payload(activity, request.args)})
            except ValidationError as e:
                return json_error(str(e), 400)

        if view is ViewMode.LOCATIONS:
            require_capability(container, activity, Capability.MANAGE_LOCATIONS)
            return redirect(url_for("locations", activity_id=activity.activity_id))

        now = now_timestamp()
        location = _selected_location(activity, optional_int(request.args.get("location")))
        group_id = optional_int(request.args.get("group"))
        tab = effective_tab(activity, request.args.get("tab"))

        payload = {
            "activity": {
                "activity_id": activity.activity_id,
                "name": activity.name,
                "intro": activity.intro if settings.print_intro else "",
            },
            "view": view.value,
            "tab": tab.value,
            "tabs": [] if settings.lock_view else [t.value for t in RosterTab],
            "timecard_enabled": settings.timecard_enabled,
            "kiosk_mode": settings.kiosk_mode,
            "kiosk_buttons": settings.kiosk_buttons,
            "can_sign_others": settings.timecard_enabled and can(container, activity, Capability.SIGN_OTHERS),
            "location_id": location.location_id if location else None,
            "locations": [
                {"location_id": loc.location_id, "name": loc.name}
                for loc in container.location_service.list_locations(activity)
            ],
            "group_id": group_id,
            "groups": [
                {"group_id": g.group_id, "name": g.name}
                for g in container.members_repo.list_groups(
                    course_id=activity.course_id, grouping_id=settings.grouping_id
                )
            ],
            "refresh_seconds": container.refresh_seconds,
            "self": None,
            "roster": None,
        }

        can_sign_self = settings.timecard_enabled and can(container, activity, Capability.SIGN_SELF)
        if can_sign_self and view is ViewMode.ROSTER and not can(container, activity, Capability.VIEW_ROSTERS):
            status = container.status_engine.current_status(
                current_user_id(),
                activity,
                location_id=location.location_id if location else None,
                origin_address=_origin(),
                now=now,
            )
            payload["self"] = {"member_id": current_user_id(), "status": status.value}

        if _roster_visible(activity):
            roster = _roster(activity, tab=tab.value, group_id=group_id, location=location, now=now)
            payload["roster"] = [e.to_dict() for e in roster.entries]

        return jsonify(payload)

    @app.route("/activities/<int:activity_id>/refresh", endpoint="refresh_roster")
    @login_required
    def refresh_roster(activity_id: int):
        """Roster fragment for client polling. Read-only."""

        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.VIEW)
        if not _roster_visible(activity):
            abort(403)

        location = _selected_location(activity, optional_int(request.args.get("location")))
        roster = _roster(
            activity,
            tab=request.args.get("tab"),
            group_id=optional_int(request.args.get("group")),
            location=location,
            now=now_timestamp(),
        )
        return jsonify({"tab": roster.tab.value, "roster": [e.to_dict() for e in roster.entries]})

    @app.route("/activities/<int:activity_id>/toggle", methods=["POST"], endpoint="toggle")
    @login_required
    def toggle(activity_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.VIEW)

        tab = effective_tab(activity, request.form.get("tab") or request.args.get("tab"))
        location_id = optional_int(request.form.get("location"))
        target = optional_int(request.form.get("member_id"))
        code = request.form.get("code")

        try:
            if target:
                require_capability(container, activity, Capability.SIGN_OTHERS)
                member_id = target
            else:
                require_capability(container, activity, Capability.SIGN_SELF)
                if activity.settings.kiosk_mode and code is not None:
                    member_id = container.lookup_engine.lookup(
                        activity, code, group_id=optional_int(request.form.get("group"))
                    )
                else:
                    member_id = current_user_id()

            result = container.timecard_service.sign_in_or_out(
                member_id,
                activity,
                origin_address=_origin(),
                location_id=location_id,
            )
            flash(result.message, "success")
        except HTTPException:
            raise
        except EmptyInput:
            pass
        except InvalidReference:
            abort(404)
        except (CodeNotFound, NoLocationConfigured, ValidationError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("Sign in/out failed for activity %s", activity.activity_id)
            flash("System error while signing in/out", "danger")

        return redirect(url_for("view_activity", activity_id=activity.activity_id, tab=tab.value, location=location_id))

    @app.route("/activities/<int:activity_id>/lookup", methods=["POST"], endpoint="kiosk_lookup")
    @login_required
    def kiosk_lookup(activity_id: int):
        """Kiosk code submit: resolve the code, then toggle that member."""

        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.SIGN_SELF)
        if not activity.settings.kiosk_mode:
            return json_error("Kiosk mode is not enabled for this activity", 403)

        data = request.get_json(silent=True) or request.form
        code = data.get("code", "")
        try:
            member_id = container.lookup_engine.lookup(activity, code, group_id=optional_int(data.get("group")))
            result = container.timecard_service.sign_in_or_out(
                member_id,
                activity,
                origin_address=_origin(),
                location_id=optional_int(data.get("location")),
            )
        except EmptyInput:
            return jsonify({"success": False, "message": ""}), 200
        except InvalidReference as e:
            return json_error(str(e), 404)
        except (CodeNotFound, NoLocationConfigured, ValidationError) as e:
            return json_error(str(e), 400)
        except Exception:
            logger.exception("Kiosk sign in/out failed for activity %s", activity.activity_id)
            return json_error("System error while signing in/out", 500)

        return jsonify({"success": True, "direction": result.direction.value, "message": result.message}), 200

    @app.route("/activities/<int:activity_id>/history", endpoint="history")
    @login_required
    def history(activity_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.VIEW_HISTORY)
        try:
            return jsonify(_history_payload(activity, request.args))
        except ValidationError as e:
            return json_error(str(e), 400)

    @app.route("/activities/<int:activity_id>/history.csv", endpoint="history_csv")
    @login_required
    def history_csv(activity_id: int):
        activity = load_activity(container, activity_id)
        require_capability(container, activity, Capability.VIEW_HISTORY)
        try:
            filters = _history_filters(request.args)
        except ValidationError as e:
            return json_error(str(e), 400)

        page = container.history_service.history(activity, filters, page=optional_int(request.args.get("page")) or 0)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=HISTORY_CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in container.history_service.to_rows(page):
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        filename = f"attendees_history_{activity.activity_id}_p{page.page}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "X-Has-Next": "1" if page.has_next else "0",
            },
        )

    @app.route("/activities/<int:activity_id>/members/<int:member_id>/badge.png", endpoint="member_badge")
    @login_required
    def member_badge(activity_id: int, member_id: int):
        """QR code carrying the member's kiosk lookup code."""

        activity = load_activity(container, activity_id)
        if member_id != current_user_id():
            require_capability(container, activity, Capability.SIGN_OTHERS)

        member = container.members_repo.get_by_id(member_id)
        if not member:
            abort(404)

        code = next(
            (member.lookup_value(f) for f in activity.settings.effective_search_fields if member.lookup_value(f)),
            None,
        )
        if not code:
            abort(404)

        return send_file(render_qr_png(str(code)), mimetype="image/png")
