from __future__ import annotations

from typing import Iterable

from officehub.core import rbac
from officehub.core.errors import Forbidden, InvalidTransition
from officehub.core.scope import ensure_in_scope
from officehub.models.enums import Role, TaskStatus
from officehub.models.task import Task
from officehub.models.user import User


STAFF_TRANSITIONS = frozenset(
    {
        (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
        (TaskStatus.PENDING, TaskStatus.COMPLETED),
        (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
        (TaskStatus.IN_PROGRESS, TaskStatus.PENDING),
    }
)

# Admins may move a task between any two distinct statuses.
ADMIN_TRANSITIONS = frozenset(
    (source, target) for source in TaskStatus for target in TaskStatus if source != target
)

TASK_TRANSITIONS: dict[Role, frozenset] = {
    Role.ADMIN: ADMIN_TRANSITIONS,
    Role.PROPRIETOR: ADMIN_TRANSITIONS,
    Role.STAFF: STAFF_TRANSITIONS,
}

ASSIGNEE_FIELDS = frozenset({"status", "completion_level", "notes"})


def can_transition(actor: User, current: TaskStatus, target: TaskStatus) -> bool:
    if current == target:
        return True
    allowed = TASK_TRANSITIONS.get(rbac.role_of(actor), frozenset())
    return (current, target) in allowed


def check_transition(actor: User, current: TaskStatus, target: TaskStatus) -> None:
    current, target = TaskStatus(current), TaskStatus(target)
    if not can_transition(actor, current, target):
        raise InvalidTransition(
            f"Cannot move task from {current.value} to {target.value}",
            field="status",
        )


def authorize_update(actor: User, task: Task, fields: Iterable[str]) -> None:
    """Raise unless ``actor`` may write ``fields`` on ``task``."""
    if rbac.is_admin(actor):
        ensure_in_scope(actor, task)
        return
    if task.assigned_to_id != actor.id:
        raise Forbidden("You can only update tasks assigned to you")
    blocked = sorted(set(fields) - ASSIGNEE_FIELDS)
    if blocked:
        raise Forbidden(f"Staff cannot change: {', '.join(blocked)}")
