from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from officehub.core.security import get_password_hash
from officehub.db.base import Base
from officehub.db.session import enforce_sqlite_foreign_keys, get_db
from officehub.main import app
from officehub.models.enums import Role
from officehub.models.organization import Organization
from officehub.models.user import User

DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enforce_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client_factory(db: Session):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def _factory() -> TestClient:
        client_instance = TestClient(app)
        clients.append(client_instance)
        return client_instance

    try:
        yield _factory
    finally:
        for client_instance in clients:
            client_instance.close()
        app.dependency_overrides.clear()


@pytest.fixture()
def client(client_factory) -> TestClient:
    return client_factory()


@pytest.fixture()
def make_org(db: Session):
    def _make(name: str) -> Organization:
        organization = Organization(name=name, slug=name.lower().replace(" ", "-"))
        db.add(organization)
        db.commit()
        db.refresh(organization)
        return organization

    return _make


@pytest.fixture()
def make_user(db: Session):
    def _make(
        email: str,
        role: Role = Role.STAFF,
        organization: Optional[Organization] = None,
        password: str = DEFAULT_PASSWORD,
        **fields,
    ) -> User:
        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            first_name=fields.pop("first_name", email.split("@")[0].title()),
            last_name=fields.pop("last_name", "Tester"),
            organization_id=organization.id if organization else None,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def login_as(client_factory):
    """Return a client whose cookie jar holds a real session for ``user``."""

    def _login(user: User, password: str = DEFAULT_PASSWORD) -> TestClient:
        client_instance = client_factory()
        response = client_instance.post("/api/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.text
        return client_instance

    return _login


@pytest.fixture()
def org_setup(make_org, make_user):
    """Admin of org 1, staff A in org 1, staff B in org 2, and an unscoped admin."""
    org1 = make_org("Org One")
    org2 = make_org("Org Two")
    return {
        "org1": org1,
        "org2": org2,
        "admin": make_user("admin1@example.com", role=Role.ADMIN, organization=org1),
        "root": make_user("root@example.com", role=Role.ADMIN),
        "staff_a": make_user("a@example.com", organization=org1),
        "staff_b": make_user("b@example.com", organization=org2),
    }
