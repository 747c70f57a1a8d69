from __future__ import annotations

import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.http import json_error
from .container import build_container
from .core.constants import STORAGE_URL_PREFIX
from .database.bootstrap import ensure_database, init_schema, seed_admin
from .extensions import db
from .fees.controller import register as register_fees
from .holidays.controller import register as register_holidays
from .materials.controller import register as register_materials
from .notifications.controller import register as register_notifications
from .notifications.sms import SmsSender
from .payroll.controller import register as register_payroll
from .schedules.controller import register as register_schedules
from .security.crypto import configure_cipher
from .students.controller import register as register_students
from .tutors.controller import register as register_tutors
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(error: HTTPException):
        return json_error("Resource not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error: HTTPException):
        return json_error("Method not allowed", 405)

    @app.errorhandler(413)
    def too_large(error: HTTPException):
        return json_error("Uploaded file is too large", 413)


def create_app(*, overrides: Optional[Mapping[str, Any]] = None, sms_gateway: Optional[SmsSender] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    app.config.from_object(importlib.import_module(settings_module))
    if overrides:
        app.config.update(overrides)

    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("Starting with settings=%s", settings_module)

    db.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})
    configure_cipher(app)

    container = build_container(config=app.config, sms_gateway=sms_gateway)
    app.extensions["container"] = container

    register_users(app, container)
    register_students(app, container)
    register_tutors(app, container)
    register_classes(app, container)
    register_schedules(app, container)
    register_attendance(app, container)
    register_fees(app, container)
    register_payroll(app, container)
    register_materials(app, container)
    register_notifications(app, container)
    register_holidays(app, container)
    _register_error_handlers(app)

    @app.route(f"{STORAGE_URL_PREFIX}/<path:filename>", endpoint="storage")
    def storage(filename: str):
        return send_from_directory(container.uploads.root, filename)

    if app.config.get("AUTO_INIT_DB"):
        ensure_database(app.config["SQLALCHEMY_DATABASE_URI"])
        with app.app_context():
            tables = init_schema()
            logger.info("Schema ready (tables=%d)", len(tables))
    if app.config.get("AUTO_SEED_DB"):
        with app.app_context():
            seed_admin(
                username=app.config["DEFAULT_ADMIN_USERNAME"],
                password=app.config["DEFAULT_ADMIN_PASSWORD"],
            )

    return app
