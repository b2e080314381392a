"""Auth Routes — sign-in, sign-out, current actor, password reset.

Invariants:
    - Sign-in returns the bearer token, resolved role and landing path
    - Password-reset request always answers 200 with the same message
"""

from fastapi import APIRouter, Depends

from tbi_portal.api.deps import (
    get_auth_handlers, get_bearer_token, require_any_account,
)
from tbi_portal.api.responses import action_response
from tbi_portal.core.errors import AuthenticationError, ErrorKind
from tbi_portal.services.handle_accounts import user_view
from tbi_portal.services.handle_auth import Actor, AuthHandlers
from tbi_portal.schemas.auth import PasswordResetConfirm, PasswordResetRequest, SignInRequest

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/sign-in")
async def sign_in(body: SignInRequest, auth: AuthHandlers = Depends(get_auth_handlers)):
    result = await auth.sign_in(str(body.email), body.password)
    return action_response(result, overrides={ErrorKind.AUTHORIZATION: 401})


@router.post("/sign-out")
async def sign_out(
    token: str | None = Depends(get_bearer_token),
    auth: AuthHandlers = Depends(get_auth_handlers),
):
    if not token:
        raise AuthenticationError()
    return action_response(await auth.sign_out(token))


@router.get("/me")
async def current_actor(actor: Actor = Depends(require_any_account)):
    """The signed-in account and its resolved role."""
    return {
        "role": actor.role.value,
        "user": user_view(actor.user).model_dump(mode="json"),
    }


@router.post("/password-reset")
async def request_password_reset(
    body: PasswordResetRequest, auth: AuthHandlers = Depends(get_auth_handlers),
):
    return action_response(await auth.request_password_reset(str(body.email)))


@router.post("/password-reset/confirm")
async def confirm_password_reset(
    body: PasswordResetConfirm, auth: AuthHandlers = Depends(get_auth_handlers),
):
    result = await auth.reset_password(body.token, body.new_password, body.confirm_password)
    return action_response(result)
