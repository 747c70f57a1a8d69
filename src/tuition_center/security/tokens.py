from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    username: str
    jti: str
    expires_at: datetime


class TokenService:
    """Issues and verifies HS256 bearer tokens."""

    def __init__(self, *, secret: str, expires_minutes: int = 1440, algorithm: str = "HS256"):
        self._secret = secret
        self._ttl = timedelta(minutes=int(expires_minutes))
        self._algorithm = algorithm

    def issue(self, *, user_id: int, role: str, username: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role,
            "username": username,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        try:
            return TokenClaims(
                user_id=int(payload["sub"]),
                role=str(payload["role"]),
                username=str(payload.get("username", "")),
                jti=str(payload["jti"]),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid token") from exc
