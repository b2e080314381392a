"""MentorRequest ORM — a mentee's request to a mentor, moved through admin then mentor approval.

Invariants:
    - status transitions: pending -> admin_approved | admin_rejected;
      admin_approved -> mentor_approved | mentor_rejected
    - Mentor name/email denormalized at creation: decisions never re-read the mentor record
    - Never deleted

Design Decisions:
    - Composite index (user_id, mentor_id, status) backs the advisory duplicate check
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, new_id, utcnow


class MentorRequest(Base):
    """Two-stage mentor request."""
    __tablename__ = "mentor_requests"
    __table_args__ = (
        Index("ix_mentor_requests_user_mentor_status", "user_id", "mentor_id", "status"),
        Index("ix_mentor_requests_mentor_email_status", "mentor_email", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    user_name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False)
    mentor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    mentor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    mentor_email: Mapped[str] = mapped_column(String(320), nullable=False)
    request_message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    admin_processed_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    mentor_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    mentor_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
