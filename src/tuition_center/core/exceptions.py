from __future__ import annotations

from typing import Mapping, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` maps a field name to its messages, the same shape the
    dashboard renders next to form inputs.
    """

    status_code = 422

    def __init__(self, message: str = "The given data was invalid.", errors: Optional[Mapping[str, Sequence[str]]] = None):
        super().__init__(message)
        self.errors = {k: list(v) for k, v in (errors or {}).items()}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class BadRequestError(DomainError):
    status_code = 400


class ConflictError(DomainError):
    """Raised when a write collides with an existing row (overlap, duplicate month)."""

    status_code = 409


class ExternalServiceError(DomainError):
    """Raised when an outbound provider rejects a request the caller asked for explicitly."""

    status_code = 502
