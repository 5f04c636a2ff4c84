"""Approval workflow shared by leave requests and expense claims."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from sqlalchemy.orm import Session

from officehub.core import rbac
from officehub.core.errors import Forbidden, InvalidTransition
from officehub.core.scope import ensure_in_scope
from officehub.models.enums import ApprovalStatus, Role
from officehub.models.expense import Expense
from officehub.models.leave import Leave
from officehub.models.user import User
from officehub.services.activity import log_activity


Approvable = Union[Leave, Expense]

APPROVAL_TRANSITIONS: dict[tuple[ApprovalStatus, ApprovalStatus], frozenset[Role]] = {
    (ApprovalStatus.PENDING, ApprovalStatus.APPROVED): rbac.ADMIN_ROLES,
    (ApprovalStatus.PENDING, ApprovalStatus.REJECTED): rbac.ADMIN_ROLES,
}

APPROVER_ROLES = frozenset(role for roles in APPROVAL_TRANSITIONS.values() for role in roles)


def _entity_name(record: Approvable) -> str:
    return "leave" if isinstance(record, Leave) else "expense"


def decide(db: Session, record: Approvable, new_status: ApprovalStatus, actor: User) -> Approvable:
    """Move a pending record to approved or rejected.

    Checks run in a fixed order: the actor's role, then whether the record is
    inside the actor's scope, then whether the transition exists.
    """
    if not rbac.user_has_any_role(actor, APPROVER_ROLES):
        raise Forbidden(f"Not authorised to decide {_entity_name(record)} requests")
    ensure_in_scope(actor, record)

    new_status = ApprovalStatus(new_status)
    allowed = APPROVAL_TRANSITIONS.get((record.status, new_status))
    if allowed is None or not rbac.user_has_any_role(actor, allowed):
        raise InvalidTransition(
            f"Cannot move {_entity_name(record)} from {record.status.value} to {new_status.value}",
            field="status",
        )

    record.status = new_status
    record.approved_by_id = actor.id
    record.approved_at = datetime.now(timezone.utc)
    db.add(record)
    db.flush()

    entity = _entity_name(record)
    log_activity(
        db,
        actor_user_id=actor.id,
        activity_type=f"{entity.upper()}_{new_status.value.upper()}",
        message=f"{entity.capitalize()} {new_status.value}: {record.id}",
        payload={f"{entity}_id": record.id, "user_id": record.user_id},
    )
    return record
