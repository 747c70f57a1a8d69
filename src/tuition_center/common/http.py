from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def json_ok(data: Any = None, *, message: Optional[str] = None, status: int = 200, **extra: Any):
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def json_error(message: str, status: int, *, errors: Optional[dict] = None):
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def api_view(view: Callable):
    """Translate domain errors to JSON responses.

    Anything that is neither a DomainError nor a werkzeug HTTPException is
    logged with its traceback and answered with a generic 500.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return json_error(str(e), e.status_code, errors=e.errors)
        except DomainError as e:
            return json_error(str(e), e.status_code)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return json_error("Server error", 500)

    return wrapper


def request_data() -> Dict[str, Any]:
    """Merge a JSON body or form fields into one dict.

    Multipart forms send lists as ``name[]`` (or repeated ``name``); those
    come back as Python lists under the bare name.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return dict(payload)

    data: Dict[str, Any] = {}
    for key in request.form.keys():
        values = request.form.getlist(key)
        if key.endswith("[]"):
            data[key[:-2]] = values
        elif len(values) > 1:
            data[key] = values
        else:
            data[key] = values[0]
    return data


def query_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value is None or not value.strip().lstrip("-").isdigit():
        return None
    return int(value)


def query_str(name: str) -> Optional[str]:
    value = request.args.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def query_date(name: str):
    value = query_str(name)
    if value is None:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError.for_field(name, f"The {name} is not a valid date.")


def query_page() -> int:
    page = query_int("page") or 1
    return max(page, 1)


def query_flag(name: str) -> bool:
    return (request.args.get(name) or "").lower() in {"1", "true", "yes"}


def money(value: Optional[Decimal]) -> float:
    return float(value or 0)


def page_payload(pagination, serialize: Callable[[Any], dict]) -> Dict[str, Any]:
    """Shape a Flask-SQLAlchemy Pagination for the dashboard tables."""
    return {
        "items": [serialize(item) for item in pagination.items],
        "page": pagination.page,
        "per_page": pagination.per_page,
        "total": pagination.total,
        "pages": pagination.pages,
    }


def serialize_all(items: Iterable[Any], serialize: Callable[[Any], dict]) -> list:
    return [serialize(item) for item in items]
