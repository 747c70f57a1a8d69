from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    def get(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def username_taken(self, username: str, *, exclude_user_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def add(self, **fields: Any) -> User:
        raise NotImplementedError

    def delete(self, user: User) -> None:
        raise NotImplementedError

    def list_by_role(self, role: str, *, active_only: bool = True) -> Sequence[User]:
        raise NotImplementedError

    def add_admin_profile(self, **fields: Any):
        raise NotImplementedError

    def revoke_token(self, *, jti: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def is_token_revoked(self, jti: str) -> bool:
        raise NotImplementedError
