"""Event Schemas — creation, partial edits, moderation and the public view.

Invariants:
    - time matches HH:MM (24h)
    - apply_link / image_url accept a URL, "" or nothing; "" is stored as NULL
    - EventUpdate: every field optional; status changes go through EventStatusUpdate
"""

import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator

from tbi_portal.core.domain_types import EventStatus
from tbi_portal.core.event_schedule import TIME_PATTERN
from tbi_portal.schemas.common import ActionResult


class EventCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=5000)
    date: datetime.date
    time: str = Field(pattern=TIME_PATTERN)
    venue: str = Field(min_length=3, max_length=300)
    apply_link: HttpUrl | None = None
    image_url: HttpUrl | None = None
    status: EventStatus = EventStatus.PENDING

    @field_validator("title", "description", "venue", "time", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("apply_link", "image_url", mode="before")
    @classmethod
    def blank_url_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=5000)
    date: datetime.date | None = None
    time: str | None = Field(None, pattern=TIME_PATTERN)
    venue: str | None = Field(None, min_length=3, max_length=300)
    apply_link: HttpUrl | None = None
    image_url: HttpUrl | None = None

    @field_validator("title", "description", "venue", "time", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("apply_link", "image_url", mode="before")
    @classmethod
    def blank_url_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventView(BaseModel):
    id: str
    title: str
    description: str
    date: datetime.date
    time: str
    venue: str
    apply_link: str | None
    image_url: str | None
    status: str
    timing: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class EventCreateResult(ActionResult):
    event_id: str | None = None
