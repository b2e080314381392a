"""TBI Portal API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PortalError → structured JSON responses (api/error_handlers.py)
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager; schema owned by alembic

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Admin bootstrap runs at startup only when ADMIN_EMAIL and ADMIN_PASSWORD are both set;
      a failure is logged and does not block startup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tbi_portal import __version__
from tbi_portal.api import error_handlers
from tbi_portal.api.routes import (
    accounts, applications, auth, events, health, maintenance,
    mentor_requests, mentors, notifications, startups,
)
from tbi_portal.config import Settings, get_settings
from tbi_portal.infrastructure import database
from tbi_portal.infrastructure.email_client import ResendEmailSender
from tbi_portal.infrastructure.identity_provider import LocalIdentityProvider
from tbi_portal.infrastructure.observability import setup_logging
from tbi_portal.infrastructure.tokens import TokenSigner
from tbi_portal.services.handle_auth import AuthHandlers

logger = logging.getLogger(__name__)


async def bootstrap_admin(settings: Settings) -> None:
    """Ensure the configured admin account exists."""
    if not (settings.admin_email and settings.admin_password):
        return
    mailer = ResendEmailSender(
        api_key=settings.resend_api_key,
        from_email=settings.resend_from_email,
        api_url=settings.resend_api_url,
        timeout_seconds=settings.email_timeout_seconds,
    )
    try:
        async with database.db_manager.session() as db:
            identity = LocalIdentityProvider(
                db, TokenSigner(settings.secret_key), mailer, settings.app_url,
                session_minutes=settings.session_token_minutes,
                reset_minutes=settings.password_reset_minutes,
            )
            created = await AuthHandlers(db, identity).bootstrap_admin(
                settings.admin_email, settings.admin_password,
            )
    except Exception as e:
        logger.error(f"Admin bootstrap failed: {e}", exc_info=True)
        return
    if created:
        logger.info("Admin account created from ADMIN_EMAIL")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await bootstrap_admin(settings)
    logger.info("TBI Portal API started")
    yield
    logger.info("TBI Portal API shutting down")
    await database.db_manager.dispose()


app = FastAPI(title="TBI Portal API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handlers.register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(applications.router)
app.include_router(mentor_requests.router)
app.include_router(mentors.router)
app.include_router(accounts.router)
app.include_router(notifications.router)
app.include_router(startups.router)
app.include_router(events.router)
app.include_router(maintenance.router)
