"""Record visibility rules shared by every list and single-record endpoint.

An identity sees one of three scopes:

* ``all``: admin or proprietor without an organization (cross-tenant).
* ``organization``: admin or proprietor attached to an organization; only
  records stamped with that organization id.
* ``self``: staff; only records they own.

Models declare which column identifies the owning user through an
``owner_field`` class attribute (``user_id`` when absent). The ``User``
model is its own owner and is matched on ``id``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import true
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from officehub.core import rbac
from officehub.core.errors import Forbidden
from officehub.models.user import User


class ScopeKind(str, enum.Enum):
    ALL = "all"
    ORGANIZATION = "organization"
    SELF = "self"


@dataclass(frozen=True)
class Scope:
    kind: ScopeKind
    organization_id: Optional[int] = None
    user_id: Optional[int] = None

    @property
    def is_global(self) -> bool:
        return self.kind == ScopeKind.ALL


def resolve_scope(identity: User) -> Scope:
    if rbac.is_admin(identity):
        if identity.organization_id is not None:
            return Scope(ScopeKind.ORGANIZATION, organization_id=identity.organization_id)
        return Scope(ScopeKind.ALL)
    return Scope(ScopeKind.SELF, user_id=identity.id)


def _owner_attr(model: Any) -> str:
    if model is User:
        return "id"
    return getattr(model, "owner_field", "user_id")


def scope_filter(identity: User, model: Any) -> ColumnElement[bool]:
    """Return a WHERE predicate restricting ``model`` rows to the identity's scope."""
    scope = resolve_scope(identity)
    if scope.kind == ScopeKind.ALL:
        return true()
    if scope.kind == ScopeKind.ORGANIZATION:
        return model.organization_id == scope.organization_id
    return getattr(model, _owner_attr(model)) == scope.user_id


def apply_scope(query: Query, identity: User, model: Any) -> Query:
    return query.filter(scope_filter(identity, model))


def in_scope(identity: User, record: Any) -> bool:
    scope = resolve_scope(identity)
    if scope.kind == ScopeKind.ALL:
        return True
    if scope.kind == ScopeKind.ORGANIZATION:
        return getattr(record, "organization_id", None) == scope.organization_id
    return getattr(record, _owner_attr(type(record)), None) == scope.user_id


def ensure_in_scope(identity: User, record: Any, *, message: str = "Record is outside your scope") -> None:
    if not in_scope(identity, record):
        raise Forbidden(message)
