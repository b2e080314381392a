"""Mentor Schemas — creation, profile edit and the merged profile view.

Invariants:
    - MentorCreate: name/designation/expertise >= 3 chars, bio >= 10, password >= 6
    - MentorProfileUpdate: every field optional, blank strings rejected
    - MentorProfileView fields are already resolved through the detail -> primary fallback
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from tbi_portal.schemas.common import ActionResult


class MentorCreate(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6, max_length=200)
    designation: str = Field(min_length=3, max_length=200)
    expertise: str = Field(min_length=3, max_length=200)
    bio: str = Field(min_length=10, max_length=5000)
    avatar_url: HttpUrl | None = None
    linkedin_url: HttpUrl | None = None


class MentorProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=200)
    designation: str | None = Field(None, min_length=3, max_length=200)
    expertise: str | None = Field(None, min_length=3, max_length=200)
    bio: str | None = Field(None, min_length=10, max_length=5000)
    avatar_url: HttpUrl | None = None
    linkedin_url: HttpUrl | None = None

    @field_validator("name", "designation", "expertise", "bio")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v


class MentorProfileView(BaseModel):
    id: str
    email: str
    status: str
    name: str | None
    designation: str | None
    expertise: str | None
    bio: str | None
    avatar_url: str | None
    linkedin_url: str | None
    profile_version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MentorCreateResult(ActionResult):
    mentor_id: str | None = None


class MentorDeleteResult(ActionResult):
    failed_steps: list[str] = []
