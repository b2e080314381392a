"""Account Handlers — user record reads, profile/preference edits, password change, onboarding, notifications.

Invariants:
    - Each edit sets exactly its own onboarding milestone (plus timestamp); milestones never unset
    - Password changes go through the identity provider; the user record only tracks the milestone
    - Notifications are only visible to, and markable by, their addressee
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.domain_types import AccountId, OnboardingMilestone
from tbi_portal.core.errors import (
    IdentityProviderError, ResourceNotFoundError, ValidationFailedError, error_from_check,
)
from tbi_portal.core.onboarding import check_password_change, milestone_fields, progress_view
from tbi_portal.core.repository_protocols import IdentityProvider
from tbi_portal.db.base import utcnow
from tbi_portal.models.notification import Notification
from tbi_portal.models.user_account import UserAccount
from tbi_portal.schemas.account import (
    NotificationPreferences, OnboardingProgress, PasswordChange, ProfileUpdate, UserResponse,
)
from tbi_portal.schemas.common import ActionResult
from tbi_portal.services.action_guard import reported

logger = logging.getLogger(__name__)


class AccountHandlers:
    def __init__(self, db: AsyncSession, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    async def get_user(self, account_id: str) -> UserResponse:
        return user_view(await self._get(account_id))

    @reported(ActionResult, "Failed to update profile. Please try again.")
    async def update_profile(self, account_id: str, data: ProfileUpdate) -> ActionResult:
        user = await self._get(account_id)
        user.first_name = data.first_name
        user.last_name = data.last_name
        user.name = f"{data.first_name} {data.last_name}"
        user.phone = data.phone
        user.bio = data.bio
        user.linkedin = data.linkedin
        self._reach(user, OnboardingMilestone.PROFILE_COMPLETED)
        await self.db.commit()
        return ActionResult(success=True, message="Profile updated successfully!")

    @reported(ActionResult, "Failed to update notification preferences. Please try again.")
    async def update_notification_preferences(
        self, account_id: str, prefs: NotificationPreferences,
    ) -> ActionResult:
        user = await self._get(account_id)
        user.email_notifications = prefs.email_notifications
        self._reach(user, OnboardingMilestone.NOTIFICATIONS_CONFIGURED)
        await self.db.commit()
        return ActionResult(success=True, message="Notification preferences updated successfully!")

    @reported(ActionResult, "Failed to update password. Please try again.")
    async def change_password(self, account_id: str, data: PasswordChange) -> ActionResult:
        invalid = check_password_change(data.new_password, data.confirm_password)
        if invalid:
            raise error_from_check(invalid)
        user = await self._get(account_id)
        try:
            await self.identity.change_password(
                AccountId(user.id), data.current_password, data.new_password,
            )
        except IdentityProviderError as e:
            if e.provider_code == "wrong-password":
                raise ValidationFailedError("Current password is incorrect.", "current_password") from e
            raise
        self._reach(user, OnboardingMilestone.PASSWORD_CHANGED)
        await self.db.commit()
        logger.info("Password changed", extra={"account_id": user.id})
        return ActionResult(success=True, message="Password updated successfully!")

    @reported(ActionResult, "Failed to update password status. Please try again.")
    async def mark_password_changed(self, account_id: str) -> ActionResult:
        user = await self._get(account_id)
        self._reach(user, OnboardingMilestone.PASSWORD_CHANGED)
        await self.db.commit()
        return ActionResult(success=True, message="Password change recorded successfully!")

    @reported(ActionResult, "Failed to complete onboarding. Please try again.")
    async def complete_onboarding(self, account_id: str) -> ActionResult:
        user = await self._get(account_id)
        self._reach(user, OnboardingMilestone.COMPLETED)
        await self.db.commit()
        return ActionResult(success=True, message="Onboarding completed successfully!")

    # --- Notifications ---

    async def list_notifications(self, account_id: str, unread_only: bool = False) -> list[Notification]:
        query = (
            select(Notification)
            .where(Notification.user_id == account_id)
            .order_by(Notification.created_at.desc())
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    @reported(ActionResult, "Failed to update notification.")
    async def mark_notification_read(self, account_id: str, notification_id: str) -> ActionResult:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .where(Notification.user_id == account_id)
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ResourceNotFoundError("Notification", notification_id)
        await self.db.commit()
        return ActionResult(success=True, message="Notification marked as read.")

    # --- Internal ---

    async def _get(self, account_id: str) -> UserAccount:
        user = await self.db.get(UserAccount, account_id)
        if user is None:
            raise ResourceNotFoundError("User", account_id)
        return user

    def _reach(self, user: UserAccount, milestone: OnboardingMilestone) -> None:
        for key, value in milestone_fields(milestone, utcnow()).items():
            setattr(user, key, value)


def user_view(user: UserAccount) -> UserResponse:
    record = {m.value: getattr(user, m.value) for m in OnboardingMilestone}
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        status=user.status,
        submission_id=user.submission_id,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        bio=user.bio,
        linkedin=user.linkedin,
        email_notifications=user.email_notifications,
        onboarding=OnboardingProgress(**progress_view(record)),
        created_at=user.created_at,
    )
