from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.http import api_view, json_ok, query_int, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(material) -> dict:
    return material.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    materials = container.material_service

    @app.route(f"{API_PREFIX}/study-materials", methods=["GET"], endpoint="materials_index")
    @api_view
    @guards.login_required
    def index():
        rows = materials.list_for(
            actor=g.current_user,
            class_id=query_int("class_id"),
            subject_id=query_int("subject_id"),
            tutor_id=query_int("tutor_id"),
            search=query_str("search"),
        )
        return json_ok(serialize_all(rows, _row))

    @app.route(f"{API_PREFIX}/study-materials/options", methods=["GET"], endpoint="materials_options")
    @api_view
    @guards.login_required
    def options():
        return json_ok(materials.options(actor=g.current_user))

    @app.route(f"{API_PREFIX}/study-materials/upload", methods=["POST"], endpoint="materials_upload")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def upload():
        material = materials.upload(request_data(), request.files.get("file"), actor=g.current_user)
        return json_ok(_row(material), message="Study material uploaded successfully", status=201)

    @app.route(f"{API_PREFIX}/study-materials/download/<int:material_id>", methods=["GET"], endpoint="materials_download")
    @api_view
    @guards.login_required
    def download(material_id: int):
        path, name = materials.download(material_id, actor=g.current_user)
        return send_file(path, as_attachment=True, download_name=name)

    @app.route(f"{API_PREFIX}/study-materials/<int:material_id>", methods=["DELETE"], endpoint="materials_delete")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def delete(material_id: int):
        materials.delete(material_id, actor=g.current_user)
        return json_ok(message="Study material deleted successfully")
