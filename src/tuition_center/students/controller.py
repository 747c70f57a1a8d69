from __future__ import annotations

from flask import Flask, g, request

from ..common.http import (
    api_view,
    json_ok,
    page_payload,
    query_date,
    query_flag,
    query_int,
    query_page,
    query_str,
    request_data,
    serialize_all,
)
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _student_row(student) -> dict:
    return student.to_dict(with_subjects=True)


def _schedule_row(schedule) -> dict:
    return schedule.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    students = container.student_service

    @app.route(f"{API_PREFIX}/students", methods=["GET"], endpoint="students_index")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def index():
        filters = dict(
            actor=g.current_user,
            search=query_str("search"),
            grade=query_str("grade"),
            class_id=query_int("class_id"),
        )
        if query_flag("all"):
            return json_ok(serialize_all(students.search(all_rows=True, **filters), _student_row))
        return json_ok(page_payload(students.search(page=query_page(), **filters), _student_row))

    @app.route(f"{API_PREFIX}/students/stats", methods=["GET"], endpoint="students_stats")
    @api_view
    @guards.roles(Role.ADMIN)
    def stats():
        return json_ok(students.stats(actor=g.current_user))

    @app.route(f"{API_PREFIX}/students/<int:student_id>", methods=["GET"], endpoint="students_show")
    @api_view
    @guards.login_required
    def show(student_id: int):
        student = students.get_for(student_id, actor=g.current_user)
        data = student.to_dict(with_subjects=True, with_fees=True)
        data["user"] = student.user.to_dict() if student.user else None
        return json_ok(data)

    @app.route(f"{API_PREFIX}/students/<int:student_id>", methods=["POST", "PUT"], endpoint="students_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def update(student_id: int):
        student = students.update(student_id, request_data(), photo=request.files.get("profile_photo"))
        return json_ok(_student_row(student), message="Student updated successfully")

    @app.route(f"{API_PREFIX}/students/<int:student_id>/enroll", methods=["POST"], endpoint="students_enroll")
    @api_view
    @guards.roles(Role.ADMIN)
    def enroll(student_id: int):
        student = students.enroll(student_id, request_data())
        return json_ok(_student_row(student), message="Student enrolled successfully")

    @app.route(f"{API_PREFIX}/students/<int:student_id>/timetable", methods=["GET"], endpoint="students_timetable")
    @api_view
    @guards.login_required
    def timetable(student_id: int):
        rows = students.timetable_for(
            student_id, actor=g.current_user, start=query_date("start_date"), end=query_date("end_date")
        )
        return json_ok(serialize_all(rows, _schedule_row))

    @app.route(f"{API_PREFIX}/student/timetable", methods=["GET"], endpoint="student_own_timetable")
    @api_view
    @guards.roles(Role.STUDENT)
    def own_timetable():
        student = students.own(g.current_user)
        rows = students.timetable(student, start=query_date("start_date"), end=query_date("end_date"))
        return json_ok(serialize_all(rows, _schedule_row))
