"""Local Identity Provider — password accounts and bearer sessions stored in the portal database.

Invariants:
    - Implements IdentityProvider (core/repository_protocols.py)
    - Passwords stored as passlib hashes only
    - Every mutating call commits its own writes: the provider behaves as an external
      system, so a later rollback in the caller never undoes a provisioned identity
    - Failures raise IdentityProviderError carrying a provider code
      (email-already-in-use, weak-password, invalid-credential, wrong-password, user-not-found)

Design Decisions:
    - Sessions are JWTs whose jti is recorded server-side, so sign_out revokes immediately
    - Reset tokens carry a fingerprint of the current password hash: once the password
      changes the token stops verifying (single use without extra state)
"""

import hashlib
import logging
from datetime import timedelta

from passlib.context import CryptContext
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.compose_emails import compose_password_reset_email
from tbi_portal.core.domain_types import (
    AccountId, DeliveryReport, IdentityClaims, IdentitySession,
)
from tbi_portal.core.errors import IdentityProviderError, InvalidTokenError
from tbi_portal.core.onboarding import MIN_PASSWORD_LENGTH
from tbi_portal.core.repository_protocols import EmailSender
from tbi_portal.db.base import utcnow
from tbi_portal.infrastructure.tokens import (
    PURPOSE_PASSWORD_RESET, PURPOSE_SESSION, TokenSigner,
)
from tbi_portal.models.identity import Identity, IdentitySessionRecord

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class LocalIdentityProvider:
    """Identity provider backed by the identities/identity_sessions tables."""

    def __init__(
        self,
        db: AsyncSession,
        signer: TokenSigner,
        mailer: EmailSender,
        app_url: str,
        session_minutes: int = 1440,
        reset_minutes: int = 60,
    ):
        self.db = db
        self.signer = signer
        self.mailer = mailer
        self.app_url = app_url.rstrip("/")
        self.session_lifetime = timedelta(minutes=session_minutes)
        self.reset_lifetime = timedelta(minutes=reset_minutes)

    async def create_account(self, email: str, password: str) -> IdentitySession:
        email = _norm(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise IdentityProviderError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                "weak-password",
            )
        if await self._find_by_email(email) is not None:
            raise IdentityProviderError(
                "The email address is already in use by another account.",
                "email-already-in-use",
            )
        identity = Identity(email=email, password_hash=pwd_context.hash(password))
        self.db.add(identity)
        await self.db.flush()
        session = await self._open_session(identity)
        await self.db.commit()
        logger.info("Identity created", extra={"account_id": identity.id})
        return session

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        identity = await self._find_by_email(_norm(email))
        if identity is None or not pwd_context.verify(password, identity.password_hash):
            raise IdentityProviderError("Invalid email or password.", "invalid-credential")
        session = await self._open_session(identity)
        await self.db.commit()
        return session

    async def sign_out(self, token: str) -> None:
        try:
            claims = self.signer.decode(token, PURPOSE_SESSION, verify_exp=False)
        except InvalidTokenError:
            return
        await self.db.execute(
            update(IdentitySessionRecord)
            .where(IdentitySessionRecord.id == claims["jti"])
            .where(IdentitySessionRecord.revoked_at.is_(None))
            .values(revoked_at=utcnow())
        )
        await self.db.commit()

    async def verify_session(self, token: str) -> IdentityClaims | None:
        try:
            claims = self.signer.decode(token, PURPOSE_SESSION)
        except InvalidTokenError:
            return None
        record = await self.db.get(IdentitySessionRecord, claims["jti"])
        if record is None or record.revoked_at is not None:
            return None
        identity = await self.db.get(Identity, record.identity_id)
        if identity is None:
            return None
        return IdentityClaims(
            account_id=AccountId(identity.id), email=identity.email, session_id=record.id,
        )

    async def change_password(
        self, account_id: AccountId, current_password: str, new_password: str,
    ) -> None:
        identity = await self._get(account_id)
        if not pwd_context.verify(current_password, identity.password_hash):
            raise IdentityProviderError("Current password is incorrect.", "wrong-password")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise IdentityProviderError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                "weak-password",
            )
        identity.password_hash = pwd_context.hash(new_password)
        identity.password_updated_at = utcnow()
        await self.db.commit()

    async def delete_account(self, account_id: AccountId) -> None:
        await self._get(account_id)
        await self.db.execute(
            delete(IdentitySessionRecord).where(IdentitySessionRecord.identity_id == account_id)
        )
        await self.db.execute(delete(Identity).where(Identity.id == account_id))
        await self.db.commit()
        logger.info("Identity deleted", extra={"account_id": account_id})

    async def send_password_reset_email(self, email: str) -> DeliveryReport:
        identity = await self._find_by_email(_norm(email))
        if identity is None:
            logger.info("Password reset requested for unknown email")
            return DeliveryReport(success=True, message="No account registered for this address.")
        issued = self.signer.issue(
            PURPOSE_PASSWORD_RESET, identity.id, self.reset_lifetime,
            fp=_fingerprint(identity.password_hash),
        )
        reset_url = f"{self.app_url}/reset-password?token={issued.token}"
        return await self.mailer.send(compose_password_reset_email(identity.email, reset_url))

    async def reset_password(self, token: str, new_password: str) -> AccountId:
        claims = self.signer.decode(token, PURPOSE_PASSWORD_RESET)
        identity = await self.db.get(Identity, claims["sub"])
        if identity is None or claims.get("fp") != _fingerprint(identity.password_hash):
            raise InvalidTokenError("This reset link is no longer valid.", "used")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise IdentityProviderError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                "weak-password",
            )
        identity.password_hash = pwd_context.hash(new_password)
        identity.password_updated_at = utcnow()
        await self.db.execute(
            update(IdentitySessionRecord)
            .where(IdentitySessionRecord.identity_id == identity.id)
            .where(IdentitySessionRecord.revoked_at.is_(None))
            .values(revoked_at=utcnow())
        )
        await self.db.commit()
        return AccountId(identity.id)

    # --- Internal ---

    async def _open_session(self, identity: Identity) -> IdentitySession:
        issued = self.signer.issue(PURPOSE_SESSION, identity.id, self.session_lifetime)
        self.db.add(IdentitySessionRecord(id=issued.jti, identity_id=identity.id))
        return IdentitySession(
            account_id=AccountId(identity.id), email=identity.email, token=issued.token,
        )

    async def _find_by_email(self, email: str) -> Identity | None:
        result = await self.db.execute(select(Identity).where(Identity.email == email))
        return result.scalar_one_or_none()

    async def _get(self, account_id: str) -> Identity:
        identity = await self.db.get(Identity, account_id)
        if identity is None:
            raise IdentityProviderError("No account found for this user.", "user-not-found")
        return identity


def _norm(email: str) -> str:
    return email.strip().lower()


def _fingerprint(password_hash: str) -> str:
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]
