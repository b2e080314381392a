"""Mentor ORM — primary mentor record plus its separately versioned detail sub-record.

Invariants:
    - Mentor.id equals the mentor's account id (one profile per mentor account)
    - MentorProfileDetail is optional; readers fall back to the primary record
    - Deleting is best-effort: detail and primary rows are removed by independent statements

Design Decisions:
    - Detail split from primary: profile edits never touch identity-linked fields (email, status)
    - No ORM relationship/cascade between the two: matches the independent-delete contract
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, utcnow


class Mentor(Base):
    """Primary mentor record — written at creation, read as fallback."""
    __tablename__ = "mentors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    designation: Mapped[str] = mapped_column(String(200), nullable=False)
    expertise: Mapped[str] = mapped_column(String(200), nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )


class MentorProfileDetail(Base):
    """Editable profile sub-record, keyed by mentor id."""
    __tablename__ = "mentor_profile_details"

    mentor_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    designation: Mapped[str | None] = mapped_column(String(200), nullable=True)
    expertise: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    profile_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
