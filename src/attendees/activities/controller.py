from __future__ import annotations

from flask import Flask, jsonify

from ..access.web import login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/courses/<int:course_id>/activities", endpoint="course_activities")
    @login_required
    def course_activities(course_id: int):
        """Course index: every attendance activity in a course."""

        activities = container.activity_service.list_for_course(course_id)
        return jsonify(
            {
                "course_id": course_id,
                "activities": [
                    {
                        "activity_id": a.activity_id,
                        "name": a.name,
                        "intro": a.intro if a.settings.print_intro else "",
                        "timecard_enabled": a.settings.timecard_enabled,
                    }
                    for a in activities
                ],
            }
        )
