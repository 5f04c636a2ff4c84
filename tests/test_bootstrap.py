from __future__ import annotations

import logging

from officehub.core.settings import settings
from officehub.models.enums import Role
from officehub.models.user import User
from officehub.seed import bootstrap


def test_bootstrap_seeds_admin_and_staff_once(db, caplog):
    with caplog.at_level(logging.WARNING, logger="officehub.seed"):
        created = bootstrap(db)
    db.commit()

    assert sorted(user.role for user in created) == sorted([Role.ADMIN, Role.STAFF])
    assert all(user.must_change_password for user in created)
    assert any("well-known passwords" in record.getMessage() for record in caplog.records)

    assert bootstrap(db) == []
    assert db.query(User).count() == 2


def test_bootstrap_leaves_existing_store_alone(db, make_user):
    make_user("someone@example.com")
    assert bootstrap(db) == []
    assert db.query(User).count() == 1


def test_bootstrap_admin_can_log_in(db, client):
    bootstrap(db)
    db.commit()

    response = client.post(
        "/api/auth/login",
        json={"email": settings.bootstrap_admin_email, "password": settings.bootstrap_admin_password},
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    assert response.json()["mustChangePassword"] is True


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-Id": "req-123"})
    assert response.headers["X-Request-Id"] == "req-123"
