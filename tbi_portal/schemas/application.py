"""Application Schemas — submission intake and the accept/reject result.

Invariants:
    - SubmissionCreate: name, email and idea required; strings stripped
    - ProcessApplicationRequest.action kept as str: unknown actions are reported in the
      result envelope (validation kind), not as a request-shape failure
    - ProcessApplicationResult.status is "success" even when the nested email failed

Design Decisions:
    - Result uses status success|error (not a bool) to keep the established contract
      of the accept/reject operation
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tbi_portal.core.domain_types import CampusStatus
from tbi_portal.core.errors import ErrorKind


class SubmissionCreate(BaseModel):
    """Public application form."""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    idea: str = Field(min_length=10, max_length=10_000)
    company_name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=40)
    domain: str | None = Field(None, max_length=100)
    sector: str | None = Field(None, max_length=100)
    campus_status: CampusStatus = CampusStatus.CAMPUS

    @field_validator("name", "idea")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v


class SubmissionCreated(BaseModel):
    id: str
    message: str = "Application submitted successfully"


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    company_name: str | None
    phone: str | None
    idea: str
    domain: str | None
    sector: str | None
    campus_status: str
    status: str
    submitted_at: datetime
    account_id: str | None
    processed_at: datetime | None


class ProcessApplicationRequest(BaseModel):
    action: str
    applicant_name: str = Field(min_length=1, max_length=200)
    applicant_email: EmailStr


class EmailResult(BaseModel):
    """The composed email plus the outcome of the single send attempt."""
    to: str
    subject: str
    body: str
    sent: bool
    detail: str


class ProcessApplicationResult(BaseModel):
    status: Literal["success", "error"]
    message: str
    error_kind: ErrorKind | None = None
    email: EmailResult | None = None
    account_id: str | None = None
    temporary_password: str | None = None
