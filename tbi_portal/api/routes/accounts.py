"""Account Routes — the signed-in account's record, profile, preferences, password and onboarding."""

from fastapi import APIRouter, Depends

from tbi_portal.api.deps import get_account_handlers, require_any_account
from tbi_portal.api.responses import action_response
from tbi_portal.schemas.account import (
    NotificationPreferences, PasswordChange, ProfileUpdate, UserResponse,
)
from tbi_portal.services.handle_accounts import AccountHandlers
from tbi_portal.services.handle_auth import Actor

router = APIRouter(prefix="/api/v1/accounts/me", tags=["accounts"])


@router.get("", response_model=UserResponse)
async def get_me(
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return await handlers.get_user(actor.user.id)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.update_profile(actor.user.id, body))


@router.put("/notification-preferences")
async def update_notification_preferences(
    body: NotificationPreferences,
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.update_notification_preferences(actor.user.id, body))


@router.post("/password")
async def change_password(
    body: PasswordChange,
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.change_password(actor.user.id, body))


@router.post("/password-changed")
async def mark_password_changed(
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.mark_password_changed(actor.user.id))


@router.post("/onboarding/complete")
async def complete_onboarding(
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.complete_onboarding(actor.user.id))
