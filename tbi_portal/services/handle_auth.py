"""Auth Handlers — sign-in with role resolution, sign-out, password reset, actor lookup, admin bootstrap.

Invariants:
    - Role always comes from resolve_role() over the user record (core/resolve_role.py)
    - A login with no active portal account is refused and its session revoked
    - Password-reset requests never reveal whether an email is registered
    - Admin bootstrap is idempotent: an existing account for the email is left untouched

Design Decisions:
    - Admins are ordinary identities whose user record carries role=admin;
      no shared credential is stored or compared anywhere
"""

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.domain_types import (
    AccountId, AccountStatus, IdentityClaims, OnboardingMilestone, Role,
)
from tbi_portal.core.errors import AuthenticationError, IdentityProviderError, error_from_check
from tbi_portal.core.onboarding import check_password_change, initial_progress, milestone_fields
from tbi_portal.core.repository_protocols import IdentityProvider
from tbi_portal.core.resolve_role import landing_path, resolve_role
from tbi_portal.db.base import utcnow
from tbi_portal.models.user_account import UserAccount
from tbi_portal.schemas.auth import SignInResult
from tbi_portal.schemas.common import ActionResult
from tbi_portal.services.action_guard import reported

logger = logging.getLogger(__name__)

RESET_REQUESTED = "If an account exists for this email, a password reset link has been sent."


@dataclass(frozen=True)
class Actor:
    """The resolved caller of a request."""
    claims: IdentityClaims | None
    user: UserAccount | None
    role: Role


ANONYMOUS = Actor(claims=None, user=None, role=Role.UNAUTHENTICATED)


class AuthHandlers:
    def __init__(self, db: AsyncSession, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    @reported(SignInResult, "Sign-in failed. Please try again.")
    async def sign_in(self, email: str, password: str) -> SignInResult:
        try:
            session = await self.identity.sign_in(email, password)
        except IdentityProviderError as e:
            if e.provider_code == "invalid-credential":
                raise AuthenticationError("Invalid email or password.") from e
            raise

        claims = IdentityClaims(account_id=session.account_id, email=session.email)
        user = await self.db.get(UserAccount, session.account_id)
        role = resolve_role(claims, _record(user))
        if role == Role.UNAUTHENTICATED:
            await self.identity.sign_out(session.token)
            raise AuthenticationError("No active portal account for this login.")

        logger.info("Signed in", extra={"account_id": session.account_id})
        return SignInResult(
            success=True,
            message="Signed in successfully.",
            token=session.token,
            role=role,
            redirect_path=landing_path(role),
        )

    @reported(ActionResult, "Sign-out failed.")
    async def sign_out(self, token: str) -> ActionResult:
        await self.identity.sign_out(token)
        return ActionResult(success=True, message="Signed out.")

    @reported(ActionResult, "Failed to request a password reset. Please try again.")
    async def request_password_reset(self, email: str) -> ActionResult:
        report = await self.identity.send_password_reset_email(email)
        if not report.success:
            logger.warning(f"Password reset email not delivered: {report.message}")
        return ActionResult(success=True, message=RESET_REQUESTED)

    @reported(ActionResult, "Failed to reset password. Please try again.")
    async def reset_password(
        self, token: str, new_password: str, confirm_password: str,
    ) -> ActionResult:
        invalid = check_password_change(new_password, confirm_password)
        if invalid:
            raise error_from_check(invalid)
        account_id = await self.identity.reset_password(token, new_password)
        user = await self.db.get(UserAccount, account_id)
        if user is not None:
            for key, value in milestone_fields(OnboardingMilestone.PASSWORD_CHANGED, utcnow()).items():
                setattr(user, key, value)
            await self.db.commit()
        return ActionResult(success=True, message="Password has been reset. You can now sign in.")

    async def resolve_actor(self, token: str | None) -> Actor:
        """Verified claims + user record + role for a bearer token."""
        if not token:
            return ANONYMOUS
        claims = await self.identity.verify_session(token)
        if claims is None:
            return ANONYMOUS
        user = await self.db.get(UserAccount, claims.account_id)
        return Actor(claims=claims, user=user, role=resolve_role(claims, _record(user)))

    async def bootstrap_admin(self, email: str, password: str, name: str = "Administrator") -> bool:
        """Create the first admin identity + user record; False when the email already has an account."""
        email = email.strip().lower()
        existing = await self.db.execute(
            select(UserAccount).where(func.lower(UserAccount.email) == email)
        )
        user = existing.scalar_one_or_none()
        if user is not None:
            if user.role != Role.ADMIN.value:
                logger.warning("Bootstrap admin email belongs to a non-admin account")
            return False

        try:
            session = await self.identity.create_account(email, password)
        except IdentityProviderError as e:
            if e.provider_code != "email-already-in-use":
                raise
            session = await self.identity.sign_in(email, password)
        await self.identity.sign_out(session.token)

        progress = initial_progress()
        progress.update(milestone_fields(OnboardingMilestone.COMPLETED, utcnow()))
        self.db.add(UserAccount(
            id=AccountId(session.account_id),
            email=email,
            name=name,
            role=Role.ADMIN.value,
            status=AccountStatus.ACTIVE.value,
            email_notifications=True,
            **progress,
        ))
        await self.db.commit()
        logger.info("Admin account bootstrapped", extra={"account_id": session.account_id})
        return True


def _record(user: UserAccount | None) -> dict | None:
    if user is None:
        return None
    return {"email": user.email, "role": user.role, "status": user.status}
