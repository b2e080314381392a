"""Maintenance Routes — scheduled housekeeping called by an external cron.

Invariants:
    - Protected by the shared CLEANUP_API_KEY bearer key, compared in constant time
    - An unset key disables the endpoint (every call is 401)
"""

import logging
import secrets

from fastapi import APIRouter, Depends

from tbi_portal.api.deps import get_bearer_token, get_mentor_request_handlers
from tbi_portal.config import Settings, get_settings
from tbi_portal.core.errors import AuthenticationError
from tbi_portal.schemas.mentor_request import TokenCleanupResult
from tbi_portal.services.handle_mentor_requests import MentorRequestHandlers

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"])


def require_cleanup_key(
    token: str | None = Depends(get_bearer_token),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.cleanup_api_key
    if not expected or not token or not secrets.compare_digest(token, expected):
        raise AuthenticationError("Unauthorized")


@router.post(
    "/cleanup-tokens", response_model=TokenCleanupResult,
    dependencies=[Depends(require_cleanup_key)],
)
async def cleanup_expired_tokens(
    handlers: MentorRequestHandlers = Depends(get_mentor_request_handlers),
):
    """Delete expired mentor action tokens."""
    return await handlers.cleanup_expired_tokens()
