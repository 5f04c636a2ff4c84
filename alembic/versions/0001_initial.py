"""Initial OfficeHub schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


role_enum = postgresql.ENUM("ADMIN", "PROPRIETOR", "STAFF", name="role", create_type=False)

task_status_enum = postgresql.ENUM(
    "PENDING", "IN_PROGRESS", "COMPLETED", "REASSIGNED", name="task_status", create_type=False
)

task_priority_enum = postgresql.ENUM("LOW", "MEDIUM", "HIGH", "CRITICAL", name="task_priority", create_type=False)

attendance_status_enum = postgresql.ENUM(
    "PRESENT", "ABSENT", "HALF_DAY", "LEAVE", name="attendance_status", create_type=False
)

leave_type_enum = postgresql.ENUM(
    "SICK", "CASUAL", "VACATION", "EMERGENCY", "OTHER", name="leave_type", create_type=False
)

approval_status_enum = postgresql.ENUM("PENDING", "APPROVED", "REJECTED", name="approval_status", create_type=False)

ALL_ENUMS = (
    role_enum,
    task_status_enum,
    task_priority_enum,
    attendance_status_enum,
    leave_type_enum,
    approval_status_enum,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _user_fk(column: str, table: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column], ["users.id"], name=f"fk_{table}_{column}_users", ondelete=ondelete
    )


def _organization_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["organization_id"], ["organizations.id"], name=f"fk_{table}_organization_id_organizations"
    )


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ALL_ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_organizations"),
    )
    op.create_index("ix_organizations_slug", "organizations", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("role", role_enum, nullable=False, server_default="STAFF"),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("title", sa.String(length=100), nullable=True),
        sa.Column("profile_image_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("must_change_password", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        _organization_fk("users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)
    op.create_index("ix_users_is_active", "users", ["is_active"], unique=False)
    op.create_index("ix_users_organization_id", "users", ["organization_id"], unique=False)

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_sessions"),
        _user_fk("user_id", "sessions", "CASCADE"),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"], unique=False)
    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"], unique=False)

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assigned_to_id", sa.Integer(), nullable=False),
        sa.Column("assigned_by_id", sa.Integer(), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        sa.Column("status", task_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("priority", task_priority_enum, nullable=False, server_default="MEDIUM"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completion_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
        _user_fk("assigned_to_id", "tasks", "CASCADE"),
        _user_fk("assigned_by_id", "tasks", "SET NULL"),
        _organization_fk("tasks"),
        sa.CheckConstraint(
            "completion_level >= 0 AND completion_level <= 100",
            name="ck_tasks_completion_level_range",
        ),
    )
    op.create_index("ix_tasks_assigned_to_id", "tasks", ["assigned_to_id"], unique=False)
    op.create_index("ix_tasks_assigned_by_id", "tasks", ["assigned_by_id"], unique=False)
    op.create_index("ix_tasks_organization_id", "tasks", ["organization_id"], unique=False)
    op.create_index("ix_tasks_status", "tasks", ["status"], unique=False)
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"], unique=False)

    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False, server_default="PRESENT"),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("work_hours", sa.Float(), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_attendance"),
        _user_fk("user_id", "attendance", "CASCADE"),
        _organization_fk("attendance"),
    )
    op.create_index("ix_attendance_user_id", "attendance", ["user_id"], unique=False)
    op.create_index("ix_attendance_date", "attendance", ["date"], unique=False)
    op.create_index("ix_attendance_status", "attendance", ["status"], unique=False)
    op.create_index("ix_attendance_organization_id", "attendance", ["organization_id"], unique=False)

    op.create_table(
        "leaves",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", leave_type_enum, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", approval_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_leaves"),
        _user_fk("user_id", "leaves", "CASCADE"),
        _user_fk("approved_by_id", "leaves", "SET NULL"),
        _organization_fk("leaves"),
    )
    op.create_index("ix_leaves_user_id", "leaves", ["user_id"], unique=False)
    op.create_index("ix_leaves_type", "leaves", ["type"], unique=False)
    op.create_index("ix_leaves_start_date", "leaves", ["start_date"], unique=False)
    op.create_index("ix_leaves_end_date", "leaves", ["end_date"], unique=False)
    op.create_index("ix_leaves_status", "leaves", ["status"], unique=False)
    op.create_index("ix_leaves_approved_by_id", "leaves", ["approved_by_id"], unique=False)
    op.create_index("ix_leaves_organization_id", "leaves", ["organization_id"], unique=False)

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("receipt_url", sa.String(length=500), nullable=True),
        sa.Column("status", approval_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
        _user_fk("user_id", "expenses", "CASCADE"),
        _user_fk("approved_by_id", "expenses", "SET NULL"),
        _organization_fk("expenses"),
    )
    op.create_index("ix_expenses_user_id", "expenses", ["user_id"], unique=False)
    op.create_index("ix_expenses_date", "expenses", ["date"], unique=False)
    op.create_index("ix_expenses_status", "expenses", ["status"], unique=False)
    op.create_index("ix_expenses_approved_by_id", "expenses", ["approved_by_id"], unique=False)
    op.create_index("ix_expenses_organization_id", "expenses", ["organization_id"], unique=False)

    op.create_table(
        "monthly_summaries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("in_progress_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pending_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attendance_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("leave_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_expenses", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_monthly_summaries"),
        _user_fk("user_id", "monthly_summaries", "CASCADE"),
        _organization_fk("monthly_summaries"),
        sa.UniqueConstraint("user_id", "month", "year", name="uq_monthly_summaries_user_period"),
    )
    op.create_index("ix_monthly_summaries_user_id", "monthly_summaries", ["user_id"], unique=False)
    op.create_index("ix_monthly_summaries_organization_id", "monthly_summaries", ["organization_id"], unique=False)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("actor_user_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("payload_json", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_activity_logs"),
        _user_fk("actor_user_id", "activity_logs", "SET NULL"),
    )
    op.create_index("ix_activity_logs_actor_user_id", "activity_logs", ["actor_user_id"], unique=False)
    op.create_index("ix_activity_logs_type", "activity_logs", ["type"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_logs_type", table_name="activity_logs")
    op.drop_index("ix_activity_logs_actor_user_id", table_name="activity_logs")
    op.drop_table("activity_logs")

    op.drop_index("ix_monthly_summaries_organization_id", table_name="monthly_summaries")
    op.drop_index("ix_monthly_summaries_user_id", table_name="monthly_summaries")
    op.drop_table("monthly_summaries")

    for index in (
        "ix_expenses_organization_id",
        "ix_expenses_approved_by_id",
        "ix_expenses_status",
        "ix_expenses_date",
        "ix_expenses_user_id",
    ):
        op.drop_index(index, table_name="expenses")
    op.drop_table("expenses")

    for index in (
        "ix_leaves_organization_id",
        "ix_leaves_approved_by_id",
        "ix_leaves_status",
        "ix_leaves_end_date",
        "ix_leaves_start_date",
        "ix_leaves_type",
        "ix_leaves_user_id",
    ):
        op.drop_index(index, table_name="leaves")
    op.drop_table("leaves")

    for index in (
        "ix_attendance_organization_id",
        "ix_attendance_status",
        "ix_attendance_date",
        "ix_attendance_user_id",
    ):
        op.drop_index(index, table_name="attendance")
    op.drop_table("attendance")

    for index in (
        "ix_tasks_due_date",
        "ix_tasks_status",
        "ix_tasks_organization_id",
        "ix_tasks_assigned_by_id",
        "ix_tasks_assigned_to_id",
    ):
        op.drop_index(index, table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_sessions_expires_at", table_name="sessions")
    op.drop_index("ix_sessions_user_id", table_name="sessions")
    op.drop_table("sessions")

    op.drop_index("ix_users_organization_id", table_name="users")
    op.drop_index("ix_users_is_active", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    op.drop_index("ix_organizations_slug", table_name="organizations")
    op.drop_table("organizations")

    bind = op.get_bind()
    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(bind, checkfirst=True)
