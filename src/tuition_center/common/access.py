from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def has_role(actor, *roles: Role) -> bool:
    return actor is not None and actor.role in {r.value for r in roles}


def is_admin(actor) -> bool:
    return has_role(actor, Role.ADMIN)


def require_role(actor, *roles: Role, message: str = "Unauthorized access") -> None:
    if not has_role(actor, *roles):
        raise AuthorizationError(message)


def actor_tutor_id(actor):
    tutor = getattr(actor, "tutor", None) if has_role(actor, Role.TUTOR) else None
    return tutor.tutor_id if tutor is not None else None


def actor_student(actor):
    return getattr(actor, "student", None) if has_role(actor, Role.STUDENT) else None
