"""Auth Schemas — sign-in, password reset."""

from pydantic import BaseModel, EmailStr, Field

from tbi_portal.core.domain_types import Role
from tbi_portal.schemas.common import ActionResult


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignInResult(ActionResult):
    token: str | None = None
    role: Role | None = None
    redirect_path: str | None = None


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=1)
    new_password: str
    confirm_password: str
