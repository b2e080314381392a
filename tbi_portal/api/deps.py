"""API Dependencies — collaborator providers, handler factories, bearer-session actor and role gates.

Invariants:
    - Every external collaborator is built here and nowhere else (tests override these)
    - require_role: no/invalid session -> AuthenticationError (401),
      wrong role -> PermissionDeniedError (403)
    - The actor's role always comes from AuthHandlers.resolve_actor (user record role tag)

Design Decisions:
    - FastAPI Depends over a service locator: per-request wiring, overridable via
      app.dependency_overrides
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.config import Settings, get_settings
from tbi_portal.core.domain_types import Role
from tbi_portal.core.errors import AuthenticationError, PermissionDeniedError
from tbi_portal.core.repository_protocols import EmailSender, IdentityProvider
from tbi_portal.infrastructure.database import get_db
from tbi_portal.infrastructure.email_client import ResendEmailSender
from tbi_portal.infrastructure.identity_provider import LocalIdentityProvider
from tbi_portal.infrastructure.tokens import TokenSigner
from tbi_portal.services.handle_accounts import AccountHandlers
from tbi_portal.services.handle_applications import ApplicationHandlers
from tbi_portal.services.handle_auth import Actor, AuthHandlers
from tbi_portal.services.handle_events import EventHandlers
from tbi_portal.services.handle_mentor_requests import MentorRequestHandlers
from tbi_portal.services.handle_mentors import MentorHandlers
from tbi_portal.services.handle_startups import StartupHandlers

bearer_scheme = HTTPBearer(auto_error=False)


# --- Collaborators ---

def get_token_signer(settings: Settings = Depends(get_settings)) -> TokenSigner:
    return TokenSigner(settings.secret_key)


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    return ResendEmailSender(
        api_key=settings.resend_api_key,
        from_email=settings.resend_from_email,
        api_url=settings.resend_api_url,
        timeout_seconds=settings.email_timeout_seconds,
    )


def get_identity_provider(
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
    mailer: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> IdentityProvider:
    return LocalIdentityProvider(
        db, signer, mailer, settings.app_url,
        session_minutes=settings.session_token_minutes,
        reset_minutes=settings.password_reset_minutes,
    )


# --- Handlers ---

def get_auth_handlers(
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AuthHandlers:
    return AuthHandlers(db, identity)


def get_application_handlers(
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
    mailer: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> ApplicationHandlers:
    return ApplicationHandlers(db, identity, mailer, settings)


def get_mentor_request_handlers(
    db: AsyncSession = Depends(get_db),
    mailer: EmailSender = Depends(get_email_sender),
    signer: TokenSigner = Depends(get_token_signer),
    settings: Settings = Depends(get_settings),
) -> MentorRequestHandlers:
    return MentorRequestHandlers(db, mailer, signer, settings)


def get_mentor_handlers(
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> MentorHandlers:
    return MentorHandlers(db, identity)


def get_account_handlers(
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AccountHandlers:
    return AccountHandlers(db, identity)


def get_startup_handlers(db: AsyncSession = Depends(get_db)) -> StartupHandlers:
    return StartupHandlers(db)


def get_event_handlers(db: AsyncSession = Depends(get_db)) -> EventHandlers:
    return EventHandlers(db)


# --- Actor ---

def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    return credentials.credentials if credentials else None


async def get_current_actor(
    token: str | None = Depends(get_bearer_token),
    auth: AuthHandlers = Depends(get_auth_handlers),
) -> Actor:
    return await auth.resolve_actor(token)


def require_role(*roles: Role):
    """Dependency factory: the actor must hold one of roles."""

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role == Role.UNAUTHENTICATED:
            raise AuthenticationError()
        if actor.role not in roles:
            raise PermissionDeniedError(
                "You do not have permission to perform this action.",
            )
        return actor

    return dependency


require_admin = require_role(Role.ADMIN)
require_mentor = require_role(Role.MENTOR)
require_user = require_role(Role.USER)
require_any_account = require_role(Role.ADMIN, Role.MENTOR, Role.USER)
