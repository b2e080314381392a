"""Account Schemas — user record view, profile/preference edits, password change, notifications."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OnboardingProgress(BaseModel):
    password_changed: bool
    profile_completed: bool
    notifications_configured: bool
    completed: bool
    remaining: list[str]


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    status: str
    submission_id: str | None
    first_name: str | None
    last_name: str | None
    phone: str | None
    bio: str | None
    linkedin: str | None
    email_notifications: bool
    onboarding: OnboardingProgress
    created_at: datetime


class ProfileUpdate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=40)
    bio: str | None = Field(None, max_length=2000)
    linkedin: str | None = Field(None, max_length=500)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class NotificationPreferences(BaseModel):
    email_notifications: bool


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    title: str
    message: str
    mentor_id: str | None
    mentor_name: str | None
    request_id: str | None
    read: bool
    created_at: datetime
