"""Startup ORM — incubated startups shown in the public showcase.

Invariants:
    - logo_url is never empty: a placeholder is stored when none is supplied
    - website_url is stored as "" when absent
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tbi_portal.db.base import Base, new_id, utcnow


class Startup(Base):
    __tablename__ = "startups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    logo_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    badge_text: Mapped[str] = mapped_column(String(200), nullable=False)
    website_url: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    funnel_source: Mapped[str] = mapped_column(String(200), nullable=False)
    session: Mapped[str] = mapped_column(String(50), nullable=False)
    month_year_of_incubation: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(100), nullable=False)
    legal_status: Mapped[str] = mapped_column(String(100), nullable=False)
    rknec_email_id: Mapped[str] = mapped_column(String(320), nullable=False)
    email_id: Mapped[str] = mapped_column(String(320), nullable=False)
    mobile_number: Mapped[str] = mapped_column(String(15), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    __table_args__ = (
        Index("ix_startups_name", "name"),
    )
