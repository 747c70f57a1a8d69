from __future__ import annotations

from flask import Flask

from ..common.http import api_view, json_ok, query_int, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _class_row(school_class) -> dict:
    return school_class.to_dict(with_subjects=True)


def _subject_row(subject) -> dict:
    return subject.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    classes = container.class_service
    subjects = container.subject_service

    @app.route(f"{API_PREFIX}/classes", methods=["GET"], endpoint="classes_index")
    @api_view
    @guards.login_required
    def classes_index():
        return json_ok(serialize_all(classes.list_classes(status=query_str("status")), _class_row))

    @app.route(f"{API_PREFIX}/classes", methods=["POST"], endpoint="classes_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def classes_create():
        school_class = classes.create(request_data())
        return json_ok(_class_row(school_class), message="Class created successfully", status=201)

    @app.route(f"{API_PREFIX}/classes/<int:class_id>", methods=["GET"], endpoint="classes_show")
    @api_view
    @guards.login_required
    def classes_show(class_id: int):
        return json_ok(_class_row(classes.get(class_id)))

    @app.route(f"{API_PREFIX}/classes/<int:class_id>", methods=["PUT", "POST"], endpoint="classes_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def classes_update(class_id: int):
        school_class = classes.update(class_id, request_data())
        return json_ok(_class_row(school_class), message="Class updated successfully")

    @app.route(f"{API_PREFIX}/classes/<int:class_id>", methods=["DELETE"], endpoint="classes_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def classes_delete(class_id: int):
        classes.delete(class_id)
        return json_ok(message="Class deleted successfully")

    @app.route(f"{API_PREFIX}/subjects", methods=["GET"], endpoint="subjects_index")
    @api_view
    @guards.login_required
    def subjects_index():
        rows = subjects.list_subjects(class_id=query_int("class_id"), tutor_id=query_int("tutor_id"))
        return json_ok(serialize_all(rows, _subject_row))

    @app.route(f"{API_PREFIX}/subjects", methods=["POST"], endpoint="subjects_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def subjects_create():
        subject = subjects.create(request_data())
        return json_ok(_subject_row(subject), message="Subject created successfully", status=201)

    @app.route(f"{API_PREFIX}/subjects/<int:subject_id>", methods=["GET"], endpoint="subjects_show")
    @api_view
    @guards.login_required
    def subjects_show(subject_id: int):
        return json_ok(_subject_row(subjects.get(subject_id)))

    @app.route(f"{API_PREFIX}/subjects/<int:subject_id>", methods=["PUT", "POST"], endpoint="subjects_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def subjects_update(subject_id: int):
        subject = subjects.update(subject_id, request_data())
        return json_ok(_subject_row(subject), message="Subject updated successfully")

    @app.route(f"{API_PREFIX}/subjects/<int:subject_id>", methods=["DELETE"], endpoint="subjects_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def subjects_delete(subject_id: int):
        subjects.delete(subject_id)
        return json_ok(message="Subject deleted successfully")
