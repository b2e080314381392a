"""Startups showcase and events.

Revision ID: 002_startups_events
Revises: 001_initial
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_startups_events"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        for name in ("created_at", "updated_at")
    ]


def upgrade() -> None:
    op.create_table(
        "startups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("logo_url", sa.String(1000), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("badge_text", sa.String(200), nullable=False),
        sa.Column("website_url", sa.String(1000), nullable=False, server_default=""),
        sa.Column("funnel_source", sa.String(200), nullable=False),
        sa.Column("session", sa.String(50), nullable=False),
        sa.Column("month_year_of_incubation", sa.String(50), nullable=False),
        sa.Column("status", sa.String(100), nullable=False),
        sa.Column("legal_status", sa.String(100), nullable=False),
        sa.Column("rknec_email_id", sa.String(320), nullable=False),
        sa.Column("email_id", sa.String(320), nullable=False),
        sa.Column("mobile_number", sa.String(15), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_startups_name", "startups", ["name"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("event_date", sa.Date, nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("venue", sa.String(300), nullable=False),
        sa.Column("apply_link", sa.String(1000), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
    )
    op.create_index("ix_events_status_date", "events", ["status", "event_date"])


def downgrade() -> None:
    op.drop_table("events")
    op.drop_table("startups")
