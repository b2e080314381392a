"""Mentor-Request Schemas — submission, decisions, token decisions and read views.

Invariants:
    - request_message length is NOT validated here: core/enforce_mentor_request.py reports
      it in the result envelope with the established messages
    - Decision actions are the DecisionAction enum (approve | reject)
    - notes capped at 2000 chars
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tbi_portal.core.domain_types import DecisionAction
from tbi_portal.schemas.common import ActionResult


class MentorRequestCreate(BaseModel):
    mentor_id: str = Field(min_length=1)
    request_message: str = Field(max_length=5000)


class MentorRequestSubmitResult(ActionResult):
    request_id: str | None = None


class AdminDecisionRequest(BaseModel):
    action: DecisionAction
    notes: str | None = Field(None, max_length=2000)


class MentorDecisionRequest(BaseModel):
    action: DecisionAction
    notes: str | None = Field(None, max_length=2000)


class TokenDecisionRequest(BaseModel):
    """Decision taken from an emailed link; the token is the only credential."""
    token: str = Field(min_length=1)
    action: DecisionAction
    notes: str | None = Field(None, max_length=2000)


class MentorRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user_name: str
    user_email: str
    mentor_id: str
    mentor_name: str
    mentor_email: str
    request_message: str
    status: str
    admin_notes: str | None
    admin_processed_at: datetime | None
    mentor_notes: str | None
    mentor_processed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class MenteeProfile(BaseModel):
    """What a mentor may see of a mentee."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    bio: str | None = None
    linkedin: str | None = None


class MentorRequestDetail(BaseModel):
    request: MentorRequestResponse
    mentee: MenteeProfile | None = None


class ApprovedMentee(BaseModel):
    request_id: str
    mentee: MenteeProfile
    approved_at: datetime | None


class TokenCleanupResult(BaseModel):
    success: bool
    deleted_count: int
    message: str
