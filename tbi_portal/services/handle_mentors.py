"""Mentor Handlers — create (with identity), profile edit, profile reads, best-effort delete.

Invariants:
    - A mentor's primary record, detail sub-record and user record share the identity's account id
    - Profile edits write the detail sub-record only and bump profile_version
    - Reads merge detail -> primary per field (core/mentor_profile.py)
    - Delete runs independent steps; one failing step never stops the others

Design Decisions:
    - Creation reuses the acceptance saga shape: provision, sign out, one commit, compensate
    - "Email already in use" surfaces as a validation message, not an upstream failure
"""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.domain_types import AccountId, AccountStatus, Role
from tbi_portal.core.errors import (
    ErrorKind, IdentityProviderError, InternalError, PortalError,
    ResourceNotFoundError, ValidationFailedError,
)
from tbi_portal.core.mentor_profile import merge_profile
from tbi_portal.core.onboarding import initial_progress
from tbi_portal.core.repository_protocols import IdentityProvider
from tbi_portal.db.base import utcnow
from tbi_portal.models.mentor import Mentor, MentorProfileDetail
from tbi_portal.models.user_account import UserAccount
from tbi_portal.schemas.common import ActionResult
from tbi_portal.schemas.mentor import (
    MentorCreate, MentorCreateResult, MentorDeleteResult,
    MentorProfileUpdate, MentorProfileView,
)
from tbi_portal.services.action_guard import reported

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "This email is already registered. Please use a different email."


class MentorHandlers:
    def __init__(self, db: AsyncSession, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    @reported(MentorCreateResult, "Failed to create mentor")
    async def create_mentor(self, data: MentorCreate) -> MentorCreateResult:
        email = str(data.email).lower()
        if await self._email_registered(email):
            raise ValidationFailedError(EMAIL_TAKEN, "email")

        try:
            session = await self.identity.create_account(email, data.password)
        except IdentityProviderError as e:
            if e.provider_code == "email-already-in-use":
                raise ValidationFailedError(EMAIL_TAKEN, "email") from e
            raise
        account_id = session.account_id
        try:
            await self.identity.sign_out(session.token)
        except PortalError as e:
            logger.warning(f"Could not revoke provisioning session: {e.message}")

        avatar_url = str(data.avatar_url) if data.avatar_url else None
        linkedin_url = str(data.linkedin_url) if data.linkedin_url else None
        try:
            self.db.add(Mentor(
                id=account_id, name=data.name, email=email,
                designation=data.designation, expertise=data.expertise, bio=data.bio,
                avatar_url=avatar_url, linkedin_url=linkedin_url,
                status=AccountStatus.ACTIVE.value,
            ))
            self.db.add(MentorProfileDetail(
                mentor_id=account_id, name=data.name,
                designation=data.designation, expertise=data.expertise, bio=data.bio,
                avatar_url=avatar_url, linkedin_url=linkedin_url, profile_version=1,
            ))
            self.db.add(UserAccount(
                id=account_id, email=email, name=data.name,
                role=Role.MENTOR.value, status=AccountStatus.ACTIVE.value,
                email_notifications=True, **initial_progress(),
            ))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            await self._compensate(account_id)
            logger.error(f"Mentor write failed: {e}", exc_info=True)
            raise InternalError("Failed to create mentor. The new account was removed; please retry.") from e

        logger.info("Mentor created", extra={"mentor_id": account_id})
        return MentorCreateResult(
            success=True, message="Mentor created successfully", mentor_id=account_id,
        )

    @reported(ActionResult, "Failed to update profile")
    async def update_mentor_profile(
        self, mentor_id: str, data: MentorProfileUpdate,
    ) -> ActionResult:
        if await self.db.get(Mentor, mentor_id) is None:
            raise ResourceNotFoundError("Mentor", mentor_id)
        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            raise ValidationFailedError("No profile fields to update.")

        detail = await self.db.get(MentorProfileDetail, mentor_id)
        if detail is None:
            detail = MentorProfileDetail(mentor_id=mentor_id, profile_version=0)
            self.db.add(detail)
        for key, value in changes.items():
            setattr(detail, key, value)
        detail.profile_version = (detail.profile_version or 0) + 1
        detail.updated_at = utcnow()
        await self.db.commit()
        logger.info("Mentor profile updated", extra={"mentor_id": mentor_id})
        return ActionResult(success=True, message="Profile updated successfully")

    async def get_mentor_profile(self, mentor_id: str) -> MentorProfileView:
        mentor = await self.db.get(Mentor, mentor_id)
        if mentor is None:
            raise ResourceNotFoundError("Mentor", mentor_id)
        detail = await self.db.get(MentorProfileDetail, mentor_id)
        return _view(mentor, detail)

    async def list_mentors(self) -> list[MentorProfileView]:
        result = await self.db.execute(
            select(Mentor, MentorProfileDetail)
            .outerjoin(MentorProfileDetail, MentorProfileDetail.mentor_id == Mentor.id)
            .where(Mentor.status == AccountStatus.ACTIVE.value)
            .order_by(func.lower(Mentor.name))
        )
        return [_view(mentor, detail) for mentor, detail in result.all()]

    @reported(MentorDeleteResult, "Failed to delete mentor")
    async def delete_mentor(self, mentor_id: str) -> MentorDeleteResult:
        """Best-effort: every step runs; failures are reported, not rolled back."""
        if await self.db.get(Mentor, mentor_id) is None:
            raise ResourceNotFoundError("Mentor", mentor_id)

        failed: list[str] = []
        steps = (
            ("profile details", lambda: self._delete_rows(MentorProfileDetail, MentorProfileDetail.mentor_id, mentor_id)),
            ("mentor record", lambda: self._delete_rows(Mentor, Mentor.id, mentor_id)),
            ("user record", lambda: self._delete_rows(UserAccount, UserAccount.id, mentor_id)),
            ("login account", lambda: self.identity.delete_account(AccountId(mentor_id))),
        )
        for name, step in steps:
            try:
                await step()
            except Exception as e:
                await self.db.rollback()
                logger.error(f"Mentor delete step '{name}' failed: {e}", extra={"mentor_id": mentor_id})
                failed.append(name)

        if failed:
            return MentorDeleteResult(
                success=False,
                message=f"Mentor partially deleted; failed steps: {', '.join(failed)}",
                error_kind=ErrorKind.INTERNAL,
                failed_steps=failed,
            )
        logger.info("Mentor deleted", extra={"mentor_id": mentor_id})
        return MentorDeleteResult(success=True, message="Mentor deleted successfully")

    # --- Internal ---

    async def _delete_rows(self, model, column, value: str) -> None:
        await self.db.execute(delete(model).where(column == value))
        await self.db.commit()

    async def _email_registered(self, email: str) -> bool:
        mentor = await self.db.execute(select(Mentor.id).where(func.lower(Mentor.email) == email))
        if mentor.first() is not None:
            return True
        user = await self.db.execute(select(UserAccount.id).where(func.lower(UserAccount.email) == email))
        return user.first() is not None

    async def _compensate(self, account_id: AccountId) -> None:
        try:
            await self.identity.delete_account(account_id)
        except Exception as e:
            logger.critical(
                f"Orphaned identity after failed mentor creation: {e}",
                exc_info=True, extra={"account_id": account_id},
            )


def _view(mentor: Mentor, detail: MentorProfileDetail | None) -> MentorProfileView:
    primary = {column.key: getattr(mentor, column.key) for column in Mentor.__table__.columns}
    extra = None
    if detail is not None:
        extra = {
            column.key: getattr(detail, column.key)
            for column in MentorProfileDetail.__table__.columns
        }
    return MentorProfileView(**merge_profile(primary, extra))
