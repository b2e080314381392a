"""Notification Routes — the signed-in account's in-app notifications."""

from fastapi import APIRouter, Depends, Query

from tbi_portal.api.deps import get_account_handlers, require_any_account
from tbi_portal.api.responses import action_response
from tbi_portal.schemas.account import NotificationResponse
from tbi_portal.services.handle_accounts import AccountHandlers
from tbi_portal.services.handle_auth import Actor

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread: bool = Query(False),
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return await handlers.list_notifications(actor.user.id, unread_only=unread)


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    actor: Actor = Depends(require_any_account),
    handlers: AccountHandlers = Depends(get_account_handlers),
):
    return action_response(await handlers.mark_notification_read(actor.user.id, notification_id))
