from __future__ import annotations

from typing import Iterable, Optional

from officehub.core.errors import Forbidden
from officehub.models.enums import Role


ADMIN_ROLES = frozenset({Role.ADMIN, Role.PROPRIETOR})


def _coerce_role(value) -> Optional[Role]:
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).lower())
    except ValueError:
        return None


def role_of(user) -> Optional[Role]:
    return _coerce_role(getattr(user, "role", None))


def user_has_any_role(user, roles: Iterable[Role]) -> bool:
    return role_of(user) in set(roles)


def is_admin(user) -> bool:
    """Admins and proprietors share the same privileges."""
    return user_has_any_role(user, ADMIN_ROLES)


def require_roles(user, required_roles: Iterable[Role], *, message: Optional[str] = None) -> None:
    required = list(required_roles)
    if not user_has_any_role(user, required):
        role_names = ", ".join(role.value for role in required)
        raise Forbidden(message or f"Access denied. Required roles: {role_names}")


def require_admin(user, *, message: Optional[str] = None) -> None:
    require_roles(user, (Role.ADMIN, Role.PROPRIETOR), message=message or "Admin access required")
