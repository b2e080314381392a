"""EmailToken ORM — server-side record of a mentor action token (emailed link).

Invariants:
    - id equals the signed token's jti claim
    - used flips to True exactly once: when its decision is recorded, or when
      the request reaches a terminal status through another channel
    - action is None for the review link, else the single action the link allows
    - Expired rows are removed by the maintenance cleanup, never read as valid
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, utcnow


class EmailToken(Base):
    __tablename__ = "email_tokens"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    request_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    mentor_email: Mapped[str] = mapped_column(String(320), nullable=False)
    action: Mapped[str | None] = mapped_column(String(10), nullable=True)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
