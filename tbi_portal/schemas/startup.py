"""Startup Schemas — showcase entries, full-replace edits and the bulk table import.

Invariants:
    - Text fields are stripped before their length limits apply
    - logo_url / website_url accept a URL, "" or nothing; "" means absent
    - mobile_number is 10-15 characters
    - Import rows are free-form dicts keyed by the spreadsheet's column headers
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from tbi_portal.schemas.common import ActionResult


class StartupCreate(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    logo_url: HttpUrl | None = None
    description: str = Field(min_length=10, max_length=5000)
    badge_text: str = Field(min_length=2, max_length=200)
    website_url: HttpUrl | None = None
    funnel_source: str = Field(min_length=1, max_length=200)
    session: str = Field(min_length=1, max_length=50)
    month_year_of_incubation: str = Field(min_length=1, max_length=50)
    status: str = Field(min_length=1, max_length=100)
    legal_status: str = Field(min_length=1, max_length=100)
    rknec_email_id: EmailStr
    email_id: EmailStr
    mobile_number: str = Field(min_length=10, max_length=15)

    @field_validator(
        "name", "description", "badge_text", "funnel_source", "session",
        "month_year_of_incubation", "status", "legal_status", "mobile_number",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("logo_url", "website_url", mode="before")
    @classmethod
    def blank_url_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StartupUpdate(StartupCreate):
    """Full replacement: every field is resent; a blank logo falls back to the placeholder."""


class StartupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    logo_url: str
    description: str
    badge_text: str
    website_url: str
    funnel_source: str
    session: str
    month_year_of_incubation: str
    status: str
    legal_status: str
    rknec_email_id: str
    email_id: str
    mobile_number: str
    created_at: datetime
    updated_at: datetime


class StartupCreateResult(ActionResult):
    startup_id: str | None = None


class StartupImportRequest(BaseModel):
    rows: list[dict[str, Any]] = Field(max_length=1000)


class StartupImportError(BaseModel):
    row: dict[str, Any]
    error: str


class StartupImportResult(ActionResult):
    imported_count: int = 0
    errors: list[StartupImportError] = []
