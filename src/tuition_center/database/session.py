from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError
from ..extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction() -> Iterator[Session]:
    """Commit the session on success, roll back on any error.

    A unique or foreign key violation surfaces as ConflictError so callers
    racing on the same row get a 409 instead of a 500.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Write rolled back on integrity error: %s", exc.orig)
        raise ConflictError("The record conflicts with an existing one.") from exc
    except Exception:
        session.rollback()
        raise
