from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select

from ..extensions import db

T = TypeVar("T")


class SqlRepository(Generic[T]):
    """Shared session plumbing for the SQLAlchemy repositories.

    Repositories only add, flush and delete; committing belongs to the
    service's ``transaction()`` block.
    """

    model: Type[T]

    @property
    def session(self):
        return db.session

    def get(self, pk: int) -> Optional[T]:
        return self.session.get(self.model, int(pk))

    def add(self, **fields: Any) -> T:
        obj = self.model(**fields)
        self.session.add(obj)
        self.session.flush()
        return obj

    def save(self, obj: T) -> T:
        self.session.add(obj)
        self.session.flush()
        return obj

    def delete(self, obj: T) -> None:
        self.session.delete(obj)
        self.session.flush()

    def count(self) -> int:
        return int(self.session.scalar(select(func.count()).select_from(self.model)) or 0)

    def scalars(self, stmt) -> Sequence[T]:
        return list(self.session.scalars(stmt).unique())
