"""User Account ORM — portal account record holding role, status and onboarding progress.

Invariants:
    - id equals the identity provider's account id
    - role in {admin, mentor, user}; status in {active, disabled}
    - Applicant accounts (role=user) carry submission_id, unique per submission
    - Four onboarding milestones are independent booleans, each with a timestamp

Design Decisions:
    - Role/status tracked here, not in the identity provider: the application enforces them
    - Milestones as columns (not JSON): each is queried and updated on its own
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, utcnow


class UserAccount(Base):
    """Account record — created on application acceptance, mentor creation, or admin bootstrap."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    submission_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, unique=True,
    )

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Notification preference
    email_notifications: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )

    # Onboarding progress
    password_changed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    password_changed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    profile_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    profile_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    notifications_configured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    notifications_configured_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
