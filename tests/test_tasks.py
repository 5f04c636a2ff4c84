from __future__ import annotations

import pytest

from officehub.core.errors import Forbidden, InvalidTransition
from officehub.models.enums import Role, TaskStatus
from officehub.models.task import Task
from officehub.services.tasks import authorize_update, check_transition


def _create_task(client, assignee_id, **extra):
    payload = {"title": "Prepare report", "assignedToId": assignee_id}
    payload.update(extra)
    return client.post("/api/tasks", json=payload)


def test_admin_creates_task_in_scope(login_as, org_setup):
    admin = login_as(org_setup["admin"])

    response = _create_task(admin, org_setup["staff_a"].id, priority="high", completionLevel=10)
    assert response.status_code == 201
    body = response.json()
    assert body["assignedToId"] == org_setup["staff_a"].id
    assert body["assignedById"] == org_setup["admin"].id
    assert body["organizationId"] == org_setup["org1"].id
    assert body["status"] == "pending"
    assert body["priority"] == "high"
    assert body["completionLevel"] == 10


def test_org_admin_cannot_assign_outside_org(login_as, org_setup):
    admin = login_as(org_setup["admin"])
    response = _create_task(admin, org_setup["staff_b"].id)
    assert response.status_code == 403


def test_staff_cannot_create_or_delete(db, login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    assert _create_task(staff, org_setup["staff_a"].id).status_code == 403

    task = Task(title="Mine", assigned_to_id=org_setup["staff_a"].id, organization_id=org_setup["org1"].id)
    db.add(task)
    db.commit()
    assert staff.delete(f"/api/tasks/{task.id}").status_code == 403


def test_task_lists_are_scoped(login_as, org_setup):
    root = login_as(org_setup["root"])
    task_a = _create_task(root, org_setup["staff_a"].id).json()
    task_b = _create_task(root, org_setup["staff_b"].id).json()

    admin_ids = {t["id"] for t in login_as(org_setup["admin"]).get("/api/tasks").json()}
    assert admin_ids == {task_a["id"]}

    staff_ids = {t["id"] for t in login_as(org_setup["staff_a"]).get("/api/tasks").json()}
    assert staff_ids == {task_a["id"]}

    assert {t["id"] for t in root.get("/api/tasks").json()} == {task_a["id"], task_b["id"]}
    assert login_as(org_setup["staff_a"]).get(f"/api/tasks/{task_b['id']}").status_code == 403


def test_staff_updates_own_task(login_as, org_setup):
    task = _create_task(login_as(org_setup["admin"]), org_setup["staff_a"].id).json()
    staff = login_as(org_setup["staff_a"])

    response = staff.patch(
        f"/api/tasks/{task['id']}",
        json={"status": "in_progress", "completionLevel": 40, "notes": "halfway"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_progress"
    assert body["completionLevel"] == 40
    assert body["notes"] == "halfway"


def test_staff_cannot_update_someone_elses_task(login_as, org_setup, make_user):
    colleague = make_user("c@example.com", organization=org_setup["org1"])
    task = _create_task(login_as(org_setup["admin"]), colleague.id).json()

    staff = login_as(org_setup["staff_a"])
    response = staff.patch(f"/api/tasks/{task['id']}", json={"status": "completed"})
    assert response.status_code == 403


def test_staff_cannot_edit_admin_fields(login_as, org_setup):
    task = _create_task(login_as(org_setup["admin"]), org_setup["staff_a"].id).json()
    staff = login_as(org_setup["staff_a"])

    response = staff.patch(f"/api/tasks/{task['id']}", json={"title": "Renamed"})
    assert response.status_code == 403


def test_staff_cannot_reopen_completed_task(login_as, org_setup):
    task = _create_task(login_as(org_setup["admin"]), org_setup["staff_a"].id).json()
    staff = login_as(org_setup["staff_a"])

    assert staff.patch(f"/api/tasks/{task['id']}", json={"status": "completed"}).status_code == 200
    response = staff.patch(f"/api/tasks/{task['id']}", json={"status": "pending"})
    assert response.status_code == 400
    assert response.json()["field"] == "status"


def test_admin_can_reassign_and_reopen(login_as, org_setup):
    admin = login_as(org_setup["admin"])
    task = _create_task(admin, org_setup["staff_a"].id, status="completed").json()

    reopened = admin.patch(f"/api/tasks/{task['id']}", json={"status": "pending"})
    assert reopened.status_code == 200
    assert admin.patch(f"/api/tasks/{task['id']}", json={"status": "reassigned"}).json()["status"] == "reassigned"


def test_completion_level_out_of_range(login_as, org_setup):
    admin = login_as(org_setup["admin"])
    response = _create_task(admin, org_setup["staff_a"].id, completionLevel=150)
    assert response.status_code == 400
    assert response.json()["field"] == "completionLevel"


def test_admin_deletes_task(db, login_as, org_setup):
    admin = login_as(org_setup["admin"])
    task = _create_task(admin, org_setup["staff_a"].id).json()

    assert admin.delete(f"/api/tasks/{task['id']}").status_code == 200
    assert admin.get(f"/api/tasks/{task['id']}").status_code == 404


@pytest.mark.parametrize(
    "current,target",
    [
        (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
        (TaskStatus.PENDING, TaskStatus.COMPLETED),
        (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
        (TaskStatus.IN_PROGRESS, TaskStatus.PENDING),
        (TaskStatus.COMPLETED, TaskStatus.COMPLETED),
    ],
)
def test_staff_transitions_allowed(make_user, current, target):
    check_transition(make_user("s@example.com"), current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (TaskStatus.COMPLETED, TaskStatus.PENDING),
        (TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS),
        (TaskStatus.PENDING, TaskStatus.REASSIGNED),
        (TaskStatus.REASSIGNED, TaskStatus.PENDING),
    ],
)
def test_staff_transitions_rejected(make_user, current, target):
    with pytest.raises(InvalidTransition):
        check_transition(make_user("s@example.com"), current, target)


def test_authorize_update_rules(make_user):
    staff = make_user("s@example.com")
    other = make_user("o@example.com")
    admin = make_user("boss@example.com", role=Role.ADMIN)
    own = Task(title="t", assigned_to_id=staff.id)

    authorize_update(staff, own, ["status", "notes"])
    authorize_update(admin, own, ["title", "assigned_to_id"])
    with pytest.raises(Forbidden):
        authorize_update(staff, own, ["due_date"])
    with pytest.raises(Forbidden):
        authorize_update(other, own, ["status"])


def test_unknown_organization_is_rejected(login_as, org_setup):
    root = login_as(org_setup["root"])
    response = _create_task(root, org_setup["staff_a"].id, organizationId=9999)
    assert response.status_code == 400
    assert response.json()["field"] == "organizationId"
    assert root.get("/api/tasks").json() == []

    moved = _create_task(root, org_setup["staff_a"].id, organizationId=org_setup["org2"].id)
    assert moved.status_code == 201
    assert moved.json()["organizationId"] == org_setup["org2"].id


def test_task_list_carries_assignee_and_assigner(login_as, org_setup):
    _create_task(login_as(org_setup["admin"]), org_setup["staff_a"].id)

    tasks = login_as(org_setup["staff_a"]).get("/api/tasks").json()
    assert len(tasks) == 1
    assert tasks[0]["assignee"] == {
        "id": org_setup["staff_a"].id,
        "email": "a@example.com",
        "firstName": "A",
        "lastName": "Tester",
        "role": "staff",
    }
    assert tasks[0]["assigner"]["id"] == org_setup["admin"].id
    assert tasks[0]["assigner"]["role"] == "admin"
