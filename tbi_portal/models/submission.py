"""Submission ORM — an applicant's incubation-program application.

Invariants:
    - id is a string document id (uuid4 by default, caller-supplied allowed)
    - status transitions: pending -> accepted | rejected, exactly once
    - account_id / temporary_password set only on acceptance
    - processed_at set by the accept/reject action, never by submission

Design Decisions:
    - One table for on-campus and off-campus applications, discriminated by campus_status
    - Indexed on (status, submitted_at) for the admin dashboard listing
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, new_id, utcnow


class Submission(Base):
    """Applicant submission — mutated once by the accept/reject action."""
    __tablename__ = "submissions"
    __table_args__ = (
        Index("ix_submissions_status_submitted_at", "status", "submitted_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    idea: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(100), nullable=True)
    campus_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="campus",
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    account_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    temporary_password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
