from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from sqlalchemy import event, inspect
from sqlalchemy.engine import Engine, make_url
from werkzeug.security import generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import PASSWORD_MIN_LENGTH
from ..core.enums import Role
from ..extensions import db

logger = logging.getLogger(__name__)

MODEL_MODULES = (
    "users",
    "students",
    "tutors",
    "classes",
    "schedules",
    "attendance",
    "fees",
    "payroll",
    "materials",
    "notifications",
    "holidays",
)


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE clauses unless this pragma is on
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(uri: str) -> Optional[DBTarget]:
    url = make_url(uri)
    if not url.drivername.startswith("mysql"):
        return None
    return DBTarget(
        host=url.host or "localhost",
        port=int(url.port or 3306),
        user=url.username or "root",
        password=url.password or "",
        database=url.database or "tuition_center",
    )


def import_models() -> None:
    """Import every model module so the metadata knows all tables."""
    for name in MODEL_MODULES:
        importlib.import_module(f"{__package__.rsplit('.', 1)[0]}.{name}.model")


def ensure_database(uri: str) -> None:
    """Create the MySQL schema named in ``uri`` if the server lacks it."""
    target = _as_target(uri)
    if target is None:
        return
    conn = mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def init_schema() -> list:
    """Create missing tables; must run inside an app context."""
    import_models()
    db.create_all()
    return inspect(db.engine).get_table_names()


def seed_admin(*, username: str, password: str):
    """Ensure one admin login exists; returns the user and whether it was created."""
    from ..users.model import User

    username = require_non_empty(username, "username")
    require_min_length(password, "password", PASSWORD_MIN_LENGTH)

    user = db.session.scalar(db.select(User).where(User.username == username))
    if user is not None:
        return user, False

    user = User(username=username, password=generate_password_hash(password), role=Role.ADMIN.value)
    db.session.add(user)
    db.session.commit()
    logger.info("Default admin %r created", username)
    return user, True
