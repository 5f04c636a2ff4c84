"""First-run bootstrap: create the initial admin and staff accounts.

Run ``python -m officehub.seed`` against an empty database, or let the API
do it at startup (``SEED_ON_STARTUP``).
"""

from __future__ import annotations

import argparse
import logging
from typing import List

from sqlalchemy.orm import Session

from officehub.core.logging import configure_logging
from officehub.core.settings import settings
from officehub.db.base import Base
from officehub.db.session import engine, session_scope
from officehub.models.enums import Role
from officehub.models.user import User
from officehub.services import auth as auth_service

logger = logging.getLogger("officehub.seed")


def bootstrap(db: Session) -> List[User]:
    """Seed one admin and one staff account when no user exists yet."""
    if db.query(User.id).first() is not None:
        return []

    accounts = (
        (settings.bootstrap_admin_email, settings.bootstrap_admin_password, Role.ADMIN, "Admin"),
        (settings.bootstrap_staff_email, settings.bootstrap_staff_password, Role.STAFF, "Staff"),
    )
    created = []
    for email, password, role, first_name in accounts:
        user = auth_service.register(
            db,
            email,
            password,
            {"role": role, "first_name": first_name, "last_name": "User", "must_change_password": True},
        )
        created.append(user)

    logger.warning(
        "Bootstrapped default accounts %s with well-known passwords; change them before going live",
        ", ".join(user.email for user in created),
    )
    return created


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the OfficeHub database with its initial accounts")
    parser.add_argument("--create-tables", action="store_true", help="Create all tables before seeding")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging(level=settings.log_level)

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        created = bootstrap(db)
        summary = [(user.role.value, user.email) for user in created]

    if not summary:
        print("Users already exist; nothing to seed.")
        return
    print("Seed complete.")
    for role, email in summary:
        print(f"{role} login: {email}")


if __name__ == "__main__":
    main()
