from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import NotFound, ValidationError
from officehub.core.scope import apply_scope, ensure_in_scope, resolve_scope
from officehub.db.session import get_db
from officehub.models.enums import TaskStatus
from officehub.models.organization import Organization
from officehub.models.task import Task
from officehub.models.user import User
from officehub.schemas.auth import MessageResponse
from officehub.schemas.task import TaskCreate, TaskRead, TaskUpdate
from officehub.services.activity import log_activity
from officehub.services.tasks import authorize_update, check_transition

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")
    return task


def _get_assignee(db: Session, current_user: User, user_id: int) -> User:
    assignee = db.get(User, user_id)
    if not assignee:
        raise ValidationError("Assignee not found", field="assignedToId")
    ensure_in_scope(current_user, assignee, message="Assignee is outside your scope")
    return assignee


@router.get("", response_model=List[TaskRead])
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    assigned_to_id: Optional[int] = Query(None, alias="assignedToId"),
) -> List[TaskRead]:
    query = apply_scope(db.query(Task), current_user, Task).options(
        selectinload(Task.assignee),
        selectinload(Task.assigner),
    )
    if status_filter is not None:
        query = query.filter(Task.status == status_filter)
    if assigned_to_id is not None:
        query = query.filter(Task.assigned_to_id == assigned_to_id)
    tasks = query.order_by(Task.created_at.desc(), Task.id.desc()).all()
    return [TaskRead.model_validate(t) for t in tasks]


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> TaskRead:
    assignee = _get_assignee(db, current_user, task_in.assigned_to_id)
    organization_id = assignee.organization_id
    if task_in.organization_id is not None and resolve_scope(current_user).is_global:
        if db.get(Organization, task_in.organization_id) is None:
            raise ValidationError("Organization not found", field="organizationId")
        organization_id = task_in.organization_id

    task = Task(
        title=task_in.title,
        description=task_in.description,
        assigned_to_id=assignee.id,
        assigned_by_id=current_user.id,
        organization_id=organization_id,
        status=task_in.status,
        priority=task_in.priority,
        due_date=task_in.due_date,
        completion_level=task_in.completion_level,
        notes=task_in.notes,
    )
    db.add(task)
    db.flush()
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="TASK_CREATED",
        message=f"Task created: {task.title}",
        payload={"task_id": task.id, "assigned_to_id": assignee.id},
    )
    db.commit()
    db.refresh(task)
    return TaskRead.model_validate(task)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskRead:
    task = _get_task_or_404(db, task_id)
    ensure_in_scope(current_user, task)
    return TaskRead.model_validate(task)


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskRead:
    task = _get_task_or_404(db, task_id)
    update_data = task_update.model_dump(exclude_unset=True)
    authorize_update(current_user, task, update_data.keys())

    previous_status = task.status
    if update_data.get("status") is not None:
        check_transition(current_user, task.status, update_data["status"])
    if update_data.get("assigned_to_id") is not None and update_data["assigned_to_id"] != task.assigned_to_id:
        assignee = _get_assignee(db, current_user, update_data["assigned_to_id"])
        update_data["organization_id"] = assignee.organization_id

    for key, value in update_data.items():
        if value is None and key in ("title", "assigned_to_id", "status", "priority", "completion_level"):
            continue
        setattr(task, key, value)

    db.add(task)
    if task.status != previous_status:
        log_activity(
            db,
            actor_user_id=current_user.id,
            activity_type="TASK_STATUS_CHANGED",
            message=f"Task {task.id}: {previous_status.value} -> {task.status.value}",
            payload={"task_id": task.id, "from": previous_status.value, "to": task.status.value},
        )
    db.commit()
    db.refresh(task)
    return TaskRead.model_validate(task)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    task = _get_task_or_404(db, task_id)
    ensure_in_scope(current_user, task)
    db.delete(task)
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="TASK_DELETED",
        message=f"Task deleted: {task.title}",
        payload={"task_id": task_id},
    )
    db.commit()
    return MessageResponse(message="Task deleted successfully")
