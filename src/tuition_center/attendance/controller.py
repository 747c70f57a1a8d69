from __future__ import annotations

from flask import Flask, g

from ..common.http import api_view, json_ok, query_date, request_data
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    attendance = container.attendance_service

    @app.route(f"{API_PREFIX}/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def mark():
        records = attendance.mark(request_data(), actor=g.current_user)
        return json_ok([r.to_dict() for r in records], message="Attendance marked successfully")

    @app.route(f"{API_PREFIX}/attendance/schedule/<int:schedule_id>", methods=["GET"], endpoint="attendance_roster")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def roster(schedule_id: int):
        return json_ok(attendance.roster(schedule_id, actor=g.current_user))

    @app.route(f"{API_PREFIX}/attendance/analytics", methods=["GET"], endpoint="attendance_analytics")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def analytics():
        return json_ok(attendance.analytics(actor=g.current_user, on=query_date("date")))

    @app.route(f"{API_PREFIX}/attendance/student-summary", methods=["GET"], endpoint="attendance_own_summary")
    @app.route(
        f"{API_PREFIX}/attendance/student-summary/<int:student_id>",
        methods=["GET"],
        endpoint="attendance_student_summary",
    )
    @api_view
    @guards.login_required
    def student_summary(student_id=None):
        return json_ok(attendance.student_summary(actor=g.current_user, student_id=student_id))
