from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, select

from ..database.sql_base import SqlRepository
from .model import AdminProfile, RevokedToken, User


class SqlUserRepository(SqlRepository[User]):
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        return self.session.scalar(select(User).where(User.username == username))

    def username_taken(self, username: str, *, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(func.count()).select_from(User).where(User.username == username)
        if exclude_user_id is not None:
            stmt = stmt.where(User.user_id != int(exclude_user_id))
        return bool(self.session.scalar(stmt))

    def list_by_role(self, role: str, *, active_only: bool = True) -> Sequence[User]:
        stmt = select(User).where(User.role == role).order_by(User.user_id)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return self.scalars(stmt)

    def add_admin_profile(self, **fields: Any) -> AdminProfile:
        profile = AdminProfile(**fields)
        self.session.add(profile)
        self.session.flush()
        return profile

    def revoke_token(self, *, jti: str, expires_at: datetime) -> None:
        if self.is_token_revoked(jti):
            return
        # expired entries are useless once their token would fail on exp anyway
        self.session.execute(delete(RevokedToken).where(RevokedToken.expires_at < datetime.now()))
        self.session.add(RevokedToken(jti=jti, expires_at=expires_at))
        self.session.flush()

    def is_token_revoked(self, jti: str) -> bool:
        stmt = select(func.count()).select_from(RevokedToken).where(RevokedToken.jti == jti)
        return bool(self.session.scalar(stmt))
