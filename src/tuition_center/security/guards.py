from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.repository import UserRepository
from .tokens import TokenService


class Guards:
    """Route decorators that resolve the bearer token to ``g.current_user``.

    They raise domain errors, so they must sit below ``api_view``.
    """

    def __init__(self, tokens: TokenService, users: UserRepository):
        self._tokens = tokens
        self._users = users

    def _authenticate(self) -> None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Unauthenticated")

        claims = self._tokens.decode(token.strip())
        if self._users.is_token_revoked(claims.jti):
            raise AuthenticationError("Token has been revoked")

        user = self._users.get(claims.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Unauthenticated")

        g.current_user = user
        g.token_claims = claims

    def login_required(self, view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            self._authenticate()
            return view(*args, **kwargs)

        return wrapper

    def roles(self, *roles: Role) -> Callable[[Callable], Callable]:
        allowed = {r.value for r in roles}

        def decorator(view: Callable) -> Callable:
            @wraps(view)
            def wrapper(*args, **kwargs):
                self._authenticate()
                if g.current_user.role not in allowed:
                    raise AuthorizationError("Unauthorized access")
                return view(*args, **kwargs)

            return wrapper

        return decorator
