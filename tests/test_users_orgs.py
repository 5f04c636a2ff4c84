from __future__ import annotations

from officehub.models.enums import Role


def test_admin_creates_organization_with_slug(login_as, make_user):
    root = login_as(make_user("root@example.com", role=Role.ADMIN))

    response = root.post("/api/organizations", json={"name": "Acme Trading Co.", "email": "info@acme.test"})
    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "acme-trading-co"
    assert body["email"] == "info@acme.test"

    duplicate = root.post("/api/organizations", json={"name": "Acme trading co"})
    assert duplicate.status_code == 400
    assert duplicate.json()["field"] == "slug"


def test_organization_visibility(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    names = [o["name"] for o in staff.get("/api/organizations").json()]
    assert names == ["Org One"]
    assert staff.get(f"/api/organizations/{org_setup['org2'].id}").status_code == 403
    assert staff.post("/api/organizations", json={"name": "Nope"}).status_code == 403

    root = login_as(org_setup["root"])
    assert len(root.get("/api/organizations").json()) == 2

    admin = login_as(org_setup["admin"])
    renamed = admin.patch(f"/api/organizations/{org_setup['org1'].id}", json={"phone": "555-0100"})
    assert renamed.status_code == 200
    assert renamed.json()["phone"] == "555-0100"
    assert admin.patch(f"/api/organizations/{org_setup['org2'].id}", json={"phone": "1"}).status_code == 403


def test_user_management_is_admin_only(login_as, org_setup):
    staff = login_as(org_setup["staff_a"])
    assert staff.get("/api/users").status_code == 403
    assert staff.post("/api/users", json={"email": "x@example.com", "password": "password123"}).status_code == 403


def test_org_admin_sees_and_creates_users_in_own_org(login_as, org_setup):
    admin = login_as(org_setup["admin"])

    emails = {u["email"] for u in admin.get("/api/users").json()}
    assert emails == {"admin1@example.com", "a@example.com"}
    assert admin.get(f"/api/users/{org_setup['staff_b'].id}").status_code == 403

    created = admin.post(
        "/api/users",
        json={
            "email": "New.Hire@Example.com",
            "password": "password123",
            "firstName": "New",
            "lastName": "Hire",
            "organizationId": org_setup["org2"].id,
        },
    )
    assert created.status_code == 201
    body = created.json()
    assert body["email"] == "new.hire@example.com"
    assert body["role"] == "staff"
    assert body["organizationId"] == org_setup["org1"].id


def test_create_user_validation(login_as, org_setup):
    root = login_as(org_setup["root"])

    duplicate = root.post("/api/users", json={"email": "a@example.com", "password": "password123"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "User with this email already exists", "field": "email"}

    bad_email = root.post("/api/users", json={"email": "not-an-email", "password": "password123"})
    assert bad_email.status_code == 400
    assert bad_email.json() == {"message": "Invalid email address", "field": "email"}

    short = root.post("/api/users", json={"email": "short@example.com", "password": "123"})
    assert short.status_code == 400
    assert short.json()["field"] == "password"


def test_update_and_deactivate_user(client_factory, login_as, org_setup):
    staff_client = login_as(org_setup["staff_a"])
    root = login_as(org_setup["root"])

    response = root.patch(f"/api/users/{org_setup['staff_a'].id}", json={"title": "Clerk", "isActive": False})
    assert response.status_code == 200
    assert response.json()["title"] == "Clerk"
    assert response.json()["isActive"] is False

    assert staff_client.get("/api/auth/me").status_code == 401
    relogin = client_factory().post("/api/auth/login", json={"email": "a@example.com", "password": "password123"})
    assert relogin.status_code == 403


def test_admin_cannot_delete_self(login_as, org_setup):
    root = login_as(org_setup["root"])
    assert root.delete(f"/api/users/{org_setup['root'].id}").status_code == 400

    assert root.delete(f"/api/users/{org_setup['staff_b'].id}").status_code == 200
    assert root.get(f"/api/users/{org_setup['staff_b'].id}").status_code == 404


def test_only_unscoped_admin_creates_organizations(login_as, org_setup):
    admin = login_as(org_setup["admin"])
    response = admin.post("/api/organizations", json={"name": "Shadow Org"})
    assert response.status_code == 403
    assert [o["name"] for o in login_as(org_setup["root"]).get("/api/organizations").json()] == ["Org One", "Org Two"]

    created = login_as(org_setup["root"]).post("/api/organizations", json={"name": "Branch Office"})
    assert created.status_code == 201
    assert admin.get(f"/api/organizations/{created.json()['id']}").status_code == 403


def test_unscoped_admin_updates_any_organization(login_as, org_setup):
    root = login_as(org_setup["root"])
    response = root.patch(
        f"/api/organizations/{org_setup['org2'].id}",
        json={"name": "Org Two Ltd", "address": "1 Main St"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Org Two Ltd"
    assert response.json()["address"] == "1 Main St"
    assert response.json()["slug"] == "org-two"

    unchanged = root.patch(f"/api/organizations/{org_setup['org2'].id}", json={"name": None})
    assert unchanged.json()["name"] == "Org Two Ltd"

    admin = login_as(org_setup["admin"])
    assert admin.patch(f"/api/organizations/{org_setup['org2'].id}", json={"name": "Mine"}).status_code == 403
    assert admin.patch("/api/organizations/9999", json={"name": "Ghost"}).status_code == 404


def test_deleting_user_removes_their_records(login_as, org_setup):
    staff_id = org_setup["staff_a"].id
    staff = login_as(org_setup["staff_a"])
    staff.post(
        "/api/leaves",
        json={"type": "casual", "startDate": "2024-03-01", "endDate": "2024-03-01", "reason": "errand"},
    )
    admin = login_as(org_setup["admin"])
    admin.post("/api/tasks", json={"title": "File receipts", "assignedToId": staff_id})
    assert len(admin.get("/api/leaves").json()) == 1
    assert len(admin.get("/api/tasks").json()) == 1

    assert admin.delete(f"/api/users/{org_setup['staff_b'].id}").status_code == 403

    response = admin.delete(f"/api/users/{staff_id}")
    assert response.status_code == 200
    assert response.json()["message"] == "User deleted successfully"

    assert admin.get(f"/api/users/{staff_id}").status_code == 404
    assert admin.get("/api/leaves").json() == []
    assert admin.get("/api/tasks").json() == []
    assert staff.get("/api/auth/me").status_code == 401


def test_deleting_assigner_keeps_task(login_as, org_setup):
    staff_id = org_setup["staff_a"].id
    task = login_as(org_setup["admin"]).post(
        "/api/tasks", json={"title": "Stocktake", "assignedToId": staff_id}
    ).json()

    root = login_as(org_setup["root"])
    assert root.delete(f"/api/users/{org_setup['admin'].id}").status_code == 200

    kept = root.get(f"/api/tasks/{task['id']}").json()
    assert kept["assignedById"] is None
    assert kept["assigner"] is None
    assert kept["assignee"]["id"] == staff_id
