"""Initial schema — submissions, users, mentors, mentor requests, notifications, tokens, identities.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "submissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("company_name", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("idea", sa.Text, nullable=False),
        sa.Column("domain", sa.String(100), nullable=True),
        sa.Column("sector", sa.String(100), nullable=True),
        sa.Column("campus_status", sa.String(20), nullable=False, server_default="campus"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("submitted_at"),
        sa.Column("account_id", sa.String(36), nullable=True),
        sa.Column("temporary_password", sa.String(64), nullable=True),
        _timestamp("processed_at", nullable=True),
    )
    op.create_index("ix_submissions_email", "submissions", ["email"])
    op.create_index("ix_submissions_status_submitted_at", "submissions", ["status", "submitted_at"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("submission_id", sa.String(36), nullable=True, unique=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("linkedin", sa.String(500), nullable=True),
        sa.Column("email_notifications", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("password_changed", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("password_changed_at", nullable=True),
        sa.Column("profile_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("profile_completed_at", nullable=True),
        sa.Column("notifications_configured", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("notifications_configured_at", nullable=True),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("completed_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "mentors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("designation", sa.String(200), nullable=False),
        sa.Column("expertise", sa.String(200), nullable=False),
        sa.Column("bio", sa.Text, nullable=False),
        sa.Column("avatar_url", sa.String(1000), nullable=True),
        sa.Column("linkedin_url", sa.String(1000), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "mentor_profile_details",
        sa.Column("mentor_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("designation", sa.String(200), nullable=True),
        sa.Column("expertise", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("avatar_url", sa.String(1000), nullable=True),
        sa.Column("linkedin_url", sa.String(1000), nullable=True),
        sa.Column("profile_version", sa.Integer, nullable=False, server_default="1"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "mentor_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("user_name", sa.String(200), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("mentor_id", sa.String(36), nullable=False),
        sa.Column("mentor_name", sa.String(200), nullable=False),
        sa.Column("mentor_email", sa.String(320), nullable=False),
        sa.Column("request_message", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text, nullable=True),
        _timestamp("admin_processed_at", nullable=True),
        sa.Column("admin_processed_by", sa.String(36), nullable=True),
        sa.Column("mentor_notes", sa.Text, nullable=True),
        _timestamp("mentor_processed_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "ix_mentor_requests_user_mentor_status", "mentor_requests",
        ["user_id", "mentor_id", "status"],
    )
    op.create_index(
        "ix_mentor_requests_mentor_email_status", "mentor_requests",
        ["mentor_email", "status"],
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("mentor_id", sa.String(36), nullable=True),
        sa.Column("mentor_name", sa.String(200), nullable=True),
        sa.Column("request_id", sa.String(36), nullable=True),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "email_tokens",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("request_id", sa.String(36), nullable=False),
        sa.Column("mentor_email", sa.String(320), nullable=False),
        sa.Column("action", sa.String(10), nullable=True),
        sa.Column("used", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_email_tokens_request_id", "email_tokens", ["request_id"])
    op.create_index("ix_email_tokens_expires_at", "email_tokens", ["expires_at"])

    op.create_table(
        "identities",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("password_updated_at", nullable=True),
    )

    op.create_table(
        "identity_sessions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "identity_id", sa.String(36),
            sa.ForeignKey("identities.id", ondelete="CASCADE"), nullable=False,
        ),
        _timestamp("created_at"),
        _timestamp("revoked_at", nullable=True),
    )
    op.create_index("ix_identity_sessions_identity_id", "identity_sessions", ["identity_id"])


def downgrade() -> None:
    op.drop_table("identity_sessions")
    op.drop_table("identities")
    op.drop_table("email_tokens")
    op.drop_table("notifications")
    op.drop_table("mentor_requests")
    op.drop_table("mentor_profile_details")
    op.drop_table("mentors")
    op.drop_table("users")
    op.drop_table("submissions")
