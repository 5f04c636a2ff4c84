from __future__ import annotations

from datetime import date

import pytest

from officehub.core.errors import Forbidden, InvalidTransition
from officehub.models.audit import ActivityLog
from officehub.models.enums import ApprovalStatus, LeaveType
from officehub.models.leave import Leave
from officehub.services.approvals import decide

SICK_LEAVE = {
    "type": "sick",
    "startDate": "2024-03-01",
    "endDate": "2024-03-03",
    "days": 3,
    "reason": "flu",
}

LUNCH = {"amount": "42.50", "description": "Client lunch", "date": "2024-03-07", "category": "meals"}


def test_leave_request_and_approval(db, login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    created = staff.post("/api/leaves", json=SICK_LEAVE)
    assert created.status_code == 201
    leave = created.json()
    assert leave["status"] == "pending"
    assert leave["days"] == 3
    assert leave["organizationId"] == org_setup["org1"].id

    admin = login_as(org_setup["admin"])
    response = admin.patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "approved"
    assert body["approvedById"] == org_setup["admin"].id
    assert body["approvedAt"] is not None

    assert db.query(ActivityLog).filter(ActivityLog.type == "LEAVE_APPROVED").count() == 1


def test_staff_cannot_decide(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    leave = staff.post("/api/leaves", json=SICK_LEAVE).json()

    response = staff.patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"})
    assert response.status_code == 403


def test_decided_leave_cannot_be_decided_again(login_as, org_setup):
    leave = login_as(org_setup["staff_a"]).post("/api/leaves", json=SICK_LEAVE).json()
    admin = login_as(org_setup["admin"])

    assert admin.patch(f"/api/leaves/{leave['id']}/status", json={"status": "rejected"}).status_code == 200
    again = admin.patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"})
    assert again.status_code == 400
    assert again.json()["field"] == "status"


def test_org_admin_cannot_decide_other_org(login_as, org_setup):
    leave = login_as(org_setup["staff_b"]).post("/api/leaves", json=SICK_LEAVE).json()

    response = login_as(org_setup["admin"]).patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"})
    assert response.status_code == 403

    root = login_as(org_setup["root"])
    assert root.patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"}).status_code == 200


def test_decide_check_order(db, org_setup):
    leave = Leave(
        user_id=org_setup["staff_b"].id,
        type=LeaveType.SICK,
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 1),
        days=1,
        reason="x",
        status=ApprovalStatus.APPROVED,
        organization_id=org_setup["org2"].id,
    )
    db.add(leave)
    db.commit()

    # Role is checked before scope and scope before the transition table.
    with pytest.raises(Forbidden):
        decide(db, leave, ApprovalStatus.REJECTED, org_setup["staff_b"])
    with pytest.raises(Forbidden):
        decide(db, leave, ApprovalStatus.REJECTED, org_setup["admin"])
    with pytest.raises(InvalidTransition):
        decide(db, leave, ApprovalStatus.REJECTED, org_setup["root"])


def test_pending_inbox_is_admin_only_and_scoped(login_as, org_setup):
    login_as(org_setup["staff_a"]).post("/api/leaves", json=SICK_LEAVE)
    login_as(org_setup["staff_b"]).post("/api/leaves", json=SICK_LEAVE)

    assert login_as(org_setup["staff_a"]).get("/api/leaves/pending").status_code == 403
    assert len(login_as(org_setup["admin"]).get("/api/leaves/pending").json()) == 1
    assert len(login_as(org_setup["root"]).get("/api/leaves/pending").json()) == 2


def test_leave_validation(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])

    backwards = staff.post("/api/leaves", json={**SICK_LEAVE, "endDate": "2024-02-28"})
    assert backwards.status_code == 400
    assert backwards.json()["message"] == "endDate cannot be before startDate"

    without_days = {key: value for key, value in SICK_LEAVE.items() if key != "days"}
    assert staff.post("/api/leaves", json=without_days).json()["days"] == 3


def test_staff_sees_only_own_leaves(login_as, org_setup):
    login_as(org_setup["staff_b"]).post("/api/leaves", json=SICK_LEAVE)
    staff = login_as(org_setup["staff_a"])
    staff.post("/api/leaves", json=SICK_LEAVE)

    leaves = staff.get("/api/leaves").json()
    assert [l["userId"] for l in leaves] == [org_setup["staff_a"].id]


def test_expense_submission_and_approval(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    created = staff.post(
        "/api/expenses",
        json={"amount": "150.00", "description": "Printer ink", "date": "2024-03-05", "category": "supplies"},
    )
    assert created.status_code == 201
    expense = created.json()
    assert expense["amount"] == "150.00"
    assert expense["status"] == "pending"

    assert staff.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"}).status_code == 403

    admin = login_as(org_setup["admin"])
    assert [e["id"] for e in admin.get("/api/expenses/pending").json()] == [expense["id"]]
    approved = admin.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["approvedById"] == org_setup["admin"].id
    assert admin.get("/api/expenses/pending").json() == []


def test_expense_amount_must_be_positive(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    response = staff.post(
        "/api/expenses",
        json={"amount": 0, "description": "Nothing", "date": "2024-03-05", "category": "misc"},
    )
    assert response.status_code == 400
    assert response.json()["field"] == "amount"


def test_decided_expense_cannot_be_decided_again(login_as, org_setup):
    expense = login_as(org_setup["staff_a"]).post("/api/expenses", json=LUNCH).json()
    admin = login_as(org_setup["admin"])

    assert admin.patch(f"/api/expenses/{expense['id']}/status", json={"status": "rejected"}).status_code == 200
    again = admin.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"})
    assert again.status_code == 400
    assert again.json()["field"] == "status"
    assert admin.get(f"/api/expenses/{expense['id']}").json()["status"] == "rejected"


def test_org_admin_cannot_decide_expense_from_other_org(login_as, org_setup):
    expense = login_as(org_setup["staff_b"]).post("/api/expenses", json=LUNCH).json()

    admin = login_as(org_setup["admin"])
    assert admin.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"}).status_code == 403
    assert admin.get("/api/expenses/pending").json() == []

    root = login_as(org_setup["root"])
    assert root.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"}).status_code == 200


def test_lists_carry_requester_and_approver(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    leave = staff.post("/api/leaves", json=SICK_LEAVE).json()
    expense = staff.post("/api/expenses", json=LUNCH).json()

    admin = login_as(org_setup["admin"])
    pending = admin.get("/api/leaves/pending").json()
    assert pending[0]["user"]["email"] == "a@example.com"
    assert pending[0]["approvedBy"] is None

    admin.patch(f"/api/leaves/{leave['id']}/status", json={"status": "approved"})
    admin.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"})

    leaves = staff.get("/api/leaves").json()
    assert leaves[0]["user"]["id"] == org_setup["staff_a"].id
    assert leaves[0]["approvedBy"]["email"] == "admin1@example.com"

    expenses = admin.get("/api/expenses").json()
    assert expenses[0]["user"]["firstName"] == "A"
    assert expenses[0]["approvedBy"]["id"] == org_setup["admin"].id
