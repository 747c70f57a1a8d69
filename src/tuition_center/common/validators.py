from __future__ import annotations

import re
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_clock, parse_iso_date, parse_month

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError.for_field(field_name, f"The {field_name} field is required.")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError.for_field(field_name, f"The {field_name} must be at least {min_len} characters.")
    return value


def is_month(value: Optional[str]) -> bool:
    return bool(value) and bool(_MONTH_RE.match(value))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class FormValidator:
    """Collects field errors for one request payload.

    Each accessor returns the cleaned value (or None) and records a message
    instead of raising, so a single 422 lists every bad field. Call
    ``validate()`` once all fields were read.
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data = data
        self.errors: Dict[str, List[str]] = {}

    def fail(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def has(self, field: str) -> bool:
        return field in self._data

    def raw(self, field: str) -> Any:
        return self._data.get(field)

    def _missing(self, field: str, required: bool) -> bool:
        if _blank(self._data.get(field)):
            if required:
                self.fail(field, f"The {field} field is required.")
            return True
        return False

    def string(
        self,
        field: str,
        *,
        required: bool = True,
        max_length: Optional[int] = 255,
        min_length: Optional[int] = None,
    ) -> Optional[str]:
        if self._missing(field, required):
            return None
        value = str(self._data[field]).strip()
        if min_length is not None and len(value) < min_length:
            self.fail(field, f"The {field} must be at least {min_length} characters.")
        if max_length is not None and len(value) > max_length:
            self.fail(field, f"The {field} may not be greater than {max_length} characters.")
        return value

    def email(self, field: str, *, required: bool = False) -> Optional[str]:
        value = self.string(field, required=required)
        if value and not _EMAIL_RE.match(value):
            self.fail(field, f"The {field} must be a valid email address.")
        return value

    def integer(self, field: str, *, required: bool = True, minimum: Optional[int] = None) -> Optional[int]:
        if self._missing(field, required):
            return None
        try:
            value = int(str(self._data[field]).strip())
        except ValueError:
            self.fail(field, f"The {field} must be an integer.")
            return None
        if minimum is not None and value < minimum:
            self.fail(field, f"The {field} must be at least {minimum}.")
        return value

    def number(self, field: str, *, required: bool = True, minimum: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
        if self._missing(field, required):
            return None
        try:
            value = Decimal(str(self._data[field]).strip())
        except InvalidOperation:
            self.fail(field, f"The {field} must be a number.")
            return None
        if not value.is_finite():
            self.fail(field, f"The {field} must be a number.")
            return None
        if minimum is not None and value < minimum:
            self.fail(field, f"The {field} must be at least {minimum}.")
        return value.quantize(Decimal("0.01"))

    def date(self, field: str, *, required: bool = True) -> Optional[date]:
        if self._missing(field, required):
            return None
        try:
            return parse_iso_date(str(self._data[field]).strip()[:10])
        except ValueError:
            self.fail(field, f"The {field} is not a valid date.")
            return None

    def time(self, field: str, *, required: bool = True) -> Optional[time]:
        if self._missing(field, required):
            return None
        try:
            return parse_clock(str(self._data[field]))
        except ValueError:
            self.fail(field, f"The {field} must match the format H:i.")
            return None

    def month(self, field: str, *, required: bool = True) -> Optional[str]:
        if self._missing(field, required):
            return None
        value = str(self._data[field]).strip()
        try:
            if not is_month(value):
                raise ValueError(value)
            parse_month(value)
        except ValueError:
            self.fail(field, f"The {field} format is invalid. Use YYYY-MM.")
            return None
        return value

    def choice(self, field: str, choices: Iterable[str], *, required: bool = True) -> Optional[str]:
        if self._missing(field, required):
            return None
        value = str(self._data[field]).strip()
        allowed = list(choices)
        if value not in allowed:
            self.fail(field, f"The selected {field} is invalid.")
            return None
        return value

    def boolean(self, field: str, *, default: bool = False) -> bool:
        value = self._data.get(field)
        if _blank(value):
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}

    def id_list(self, field: str, *, required: bool = True) -> Optional[List[int]]:
        value = self._data.get(field)
        if isinstance(value, str):
            value = [v for v in value.split(",") if v.strip()]
        if not value:
            if required:
                self.fail(field, f"The {field} field is required.")
            return None if not required else []
        ids: List[int] = []
        for item in value:
            try:
                ids.append(int(item))
            except (TypeError, ValueError):
                self.fail(field, f"The {field} must contain integer ids.")
                return []
        # keep order, drop duplicates
        return list(dict.fromkeys(ids))

    def validate(self) -> None:
        if self.errors:
            raise ValidationError(errors=self.errors)
