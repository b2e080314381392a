"""Mentor-Request Handlers — submission, admin decision, mentor decision (session or emailed link), queries.

Invariants:
    - Public decision/submission methods never raise: every outcome is an ActionResult
    - Every status write is conditional on the status the transition starts from
      (pending for admin, admin_approved for mentor); losing a race is an invalid-state failure
    - Mentor decisions check authorization (assigned mentor email) before state
    - Action tokens are single-use: the used flag flips in the same commit as the decision
    - Emails sent after the commit; in-app notifications committed with the transition

Design Decisions:
    - Action link = signed JWT (purpose mentor_action) + email_tokens row keyed by jti:
      the signature proves origin, the row carries expiry bookkeeping and the used flag
    - Approval emails carry one unbound review link plus approve and reject links
      bound to a single action; a terminal transition marks every link of the request used
    - Duplicate check is advisory (a query, not a constraint)
"""

import logging
from datetime import timedelta

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.config import Settings
from tbi_portal.core.compose_emails import (
    compose_admin_rejection_email, compose_mentor_approval_email,
    compose_mentor_rejection_email, compose_mentor_review_email,
)
from tbi_portal.core.domain_types import (
    DecisionAction, MentorRequestStatus, NotificationType,
)
from tbi_portal.core.enforce_mentor_request import (
    TERMINAL_STATUSES, admin_success_message, check_admin_decision,
    check_mentor_authorized, check_no_active_duplicate, check_request_message,
    check_token_action, is_legal_transition, mentor_success_message,
    required_status, resolve_transition, validate_mentor_decision,
)
from tbi_portal.core.errors import (
    InvalidStateError, InvalidTokenError, PermissionDeniedError,
    ResourceNotFoundError, error_from_check,
)
from tbi_portal.core.mentor_profile import merge_profile
from tbi_portal.core.repository_protocols import EmailSender
from tbi_portal.db.base import utcnow
from tbi_portal.infrastructure.tokens import PURPOSE_MENTOR_ACTION, TokenSigner
from tbi_portal.models.email_token import EmailToken
from tbi_portal.models.mentor import Mentor, MentorProfileDetail
from tbi_portal.models.mentor_request import MentorRequest
from tbi_portal.models.user_account import UserAccount
from tbi_portal.schemas.common import ActionResult
from tbi_portal.schemas.mentor_request import (
    ApprovedMentee, MenteeProfile, MentorRequestDetail, MentorRequestResponse,
    MentorRequestSubmitResult, TokenCleanupResult,
)
from tbi_portal.services.action_guard import reported
from tbi_portal.services.notify import Notifier

logger = logging.getLogger(__name__)


class MentorRequestHandlers:
    """Two-stage mentor-request lifecycle."""

    def __init__(
        self, db: AsyncSession, mailer: EmailSender,
        signer: TokenSigner, settings: Settings,
    ):
        self.db = db
        self.notifier = Notifier(db, mailer)
        self.signer = signer
        self.settings = settings

    # --- Submission ---

    @reported(MentorRequestSubmitResult, "Failed to submit mentor request")
    async def submit_mentor_request(
        self, user_id: str, user_email: str, user_name: str,
        mentor_id: str, request_message: str,
    ) -> MentorRequestSubmitResult:
        invalid = check_request_message(request_message)
        if invalid:
            raise error_from_check(invalid)

        mentor = await self.db.get(Mentor, mentor_id)
        if mentor is None:
            raise ResourceNotFoundError("Mentor", mentor_id)
        detail = await self.db.get(MentorProfileDetail, mentor_id)
        profile = merge_profile(_as_dict(mentor), _as_dict(detail) if detail else None)

        existing = await self.db.execute(
            select(MentorRequest.status)
            .where(MentorRequest.user_id == user_id)
            .where(MentorRequest.mentor_id == mentor_id)
        )
        duplicate = check_no_active_duplicate(list(existing.scalars().all()))
        if duplicate:
            raise error_from_check(duplicate)

        now = utcnow()
        request = MentorRequest(
            user_id=user_id,
            user_name=user_name,
            user_email=user_email.lower(),
            mentor_id=mentor.id,
            mentor_name=profile["name"] or mentor.name,
            mentor_email=mentor.email,
            request_message=request_message,
            status=MentorRequestStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(request)
        await self.db.commit()
        logger.info(
            "Mentor request submitted",
            extra={"request_id": request.id, "account_id": user_id, "mentor_id": mentor.id},
        )
        return MentorRequestSubmitResult(
            success=True,
            message="Mentor request submitted successfully! Admin will review your request.",
            request_id=request.id,
        )

    # --- Admin decision ---

    @reported(ActionResult, "Failed to process request")
    async def admin_decision(
        self, request_id: str, action: DecisionAction,
        notes: str | None, admin_id: str | None = None,
    ) -> ActionResult:
        request = await self._get(request_id)
        not_pending = check_admin_decision(request.status)
        if not_pending:
            raise error_from_check(not_pending)

        target = resolve_transition("admin", request.status, action)
        now = utcnow()
        await self._transition(
            request.id, "admin", target,
            admin_notes=notes or "", admin_processed_at=now,
            admin_processed_by=admin_id, updated_at=now,
        )

        if action == DecisionAction.REJECT:
            self.notifier.add_request_notification(
                request, NotificationType.MENTOR_REQUEST_REJECTED,
                "Mentor Request Update",
                f"Your request to connect with {request.mentor_name} was not approved by admin",
            )
            await self.db.commit()
            await self.notifier.deliver(compose_admin_rejection_email(
                request.user_name, request.user_email, request.mentor_name, notes,
            ))
        else:
            review_url = self._issue_action_link(request)
            approve_url = self._issue_action_link(request, DecisionAction.APPROVE)
            reject_url = self._issue_action_link(request, DecisionAction.REJECT)
            await self.db.commit()
            await self.notifier.deliver(compose_mentor_review_email(
                request.mentor_name, request.mentor_email, request.user_name,
                request.request_message, review_url, approve_url, reject_url,
            ))

        logger.info(
            f"Admin decision recorded: {target.value}", extra={"request_id": request.id},
        )
        return ActionResult(success=True, message=admin_success_message(action))

    # --- Mentor decision ---

    @reported(ActionResult, "Failed to process mentor decision")
    async def mentor_decision(
        self, request_id: str, action: DecisionAction,
        notes: str | None, caller_email: str | None,
    ) -> ActionResult:
        request = await self._get(request_id)
        refused = validate_mentor_decision(request.status, request.mentor_email, caller_email)
        if refused:
            raise error_from_check(refused)
        return await self._apply_mentor_decision(request, action, notes)

    @reported(ActionResult, "Failed to process mentor decision")
    async def mentor_decision_with_token(
        self, token: str, action: DecisionAction, notes: str | None,
    ) -> ActionResult:
        """Same semantics as mentor_decision, authorized by an emailed action token."""
        claims = self.signer.decode(token, PURPOSE_MENTOR_ACTION)
        record = (await self.db.execute(
            select(EmailToken)
            .where(EmailToken.id == claims["jti"])
            .execution_options(populate_existing=True)
        )).scalar_one_or_none()
        if record is None or record.request_id != claims["sub"]:
            raise InvalidTokenError("This link is not valid.", "unknown")
        if record.used:
            raise InvalidTokenError("This link has already been used.", "used")

        mismatch = check_token_action(record.action, action)
        if mismatch:
            raise error_from_check(mismatch)

        request = await self._get(record.request_id)
        refused = validate_mentor_decision(request.status, request.mentor_email, record.mentor_email)
        if refused:
            raise error_from_check(refused)

        consumed = await self.db.execute(
            update(EmailToken)
            .where(EmailToken.id == record.id)
            .where(EmailToken.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        if consumed.rowcount != 1:
            raise InvalidTokenError("This link has already been used.", "used")
        return await self._apply_mentor_decision(request, action, notes)

    async def _apply_mentor_decision(
        self, request: MentorRequest, action: DecisionAction, notes: str | None,
    ) -> ActionResult:
        target = resolve_transition("mentor", request.status, action)
        now = utcnow()
        await self._transition(
            request.id, "mentor", target,
            mentor_notes=notes or "", mentor_processed_at=now, updated_at=now,
        )

        if action == DecisionAction.APPROVE:
            self.notifier.add_request_notification(
                request, NotificationType.MENTOR_REQUEST_APPROVED,
                "Mentorship Approved!",
                f"{request.mentor_name} has accepted your mentorship request",
            )
            email = compose_mentor_approval_email(
                request.user_name, request.user_email,
                request.mentor_name, request.mentor_email, notes,
            )
        else:
            self.notifier.add_request_notification(
                request, NotificationType.MENTOR_REQUEST_REJECTED,
                "Mentorship Request Update",
                f"{request.mentor_name} was unable to accept your mentorship request",
            )
            email = compose_mentor_rejection_email(
                request.user_name, request.user_email, request.mentor_name, notes,
            )
        await self.db.commit()
        await self.notifier.deliver(email)

        logger.info(
            f"Mentor decision recorded: {target.value}", extra={"request_id": request.id},
        )
        return ActionResult(success=True, message=mentor_success_message(action))

    # --- Queries ---

    async def list_for_admin(self, status: str | None = None) -> list[MentorRequest]:
        query = select(MentorRequest).order_by(MentorRequest.created_at.desc())
        if status:
            query = query.where(MentorRequest.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> list[MentorRequest]:
        result = await self.db.execute(
            select(MentorRequest)
            .where(MentorRequest.user_id == user_id)
            .order_by(MentorRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_mentor(self, mentor_email: str) -> list[MentorRequest]:
        """Requests forwarded to (or decided by) this mentor."""
        result = await self.db.execute(
            select(MentorRequest)
            .where(func.lower(MentorRequest.mentor_email) == mentor_email.strip().lower())
            .where(MentorRequest.status != MentorRequestStatus.PENDING.value)
            .where(MentorRequest.status != MentorRequestStatus.ADMIN_REJECTED.value)
            .order_by(MentorRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_for_mentor(self, request_id: str, caller_email: str) -> MentorRequestDetail:
        request = await self._get(request_id)
        refused = check_mentor_authorized(request.mentor_email, caller_email)
        if refused:
            raise error_from_check(refused)
        mentee = await self.db.get(UserAccount, request.user_id)
        return MentorRequestDetail(
            request=MentorRequestResponse.model_validate(request),
            mentee=MenteeProfile.model_validate(mentee) if mentee else None,
        )

    async def approved_mentees(self, mentor_email: str) -> list[ApprovedMentee]:
        result = await self.db.execute(
            select(MentorRequest, UserAccount)
            .join(UserAccount, UserAccount.id == MentorRequest.user_id)
            .where(func.lower(MentorRequest.mentor_email) == mentor_email.strip().lower())
            .where(MentorRequest.status == MentorRequestStatus.MENTOR_APPROVED.value)
            .order_by(MentorRequest.mentor_processed_at.desc())
        )
        return [
            ApprovedMentee(
                request_id=request.id,
                mentee=MenteeProfile.model_validate(user),
                approved_at=request.mentor_processed_at,
            )
            for request, user in result.all()
        ]

    async def mentee_profile(self, mentee_user_id: str, mentor_email: str) -> MenteeProfile:
        link = await self.db.execute(
            select(MentorRequest.id)
            .where(MentorRequest.user_id == mentee_user_id)
            .where(func.lower(MentorRequest.mentor_email) == mentor_email.strip().lower())
            .where(MentorRequest.status == MentorRequestStatus.MENTOR_APPROVED.value)
            .limit(1)
        )
        if link.scalar_one_or_none() is None:
            raise PermissionDeniedError("Unauthorized: You are not the mentor for this user.")
        mentee = await self.db.get(UserAccount, mentee_user_id)
        if mentee is None:
            raise ResourceNotFoundError("User", mentee_user_id)
        return MenteeProfile.model_validate(mentee)

    # --- Maintenance ---

    async def cleanup_expired_tokens(self) -> TokenCleanupResult:
        result = await self.db.execute(
            delete(EmailToken).where(EmailToken.expires_at < utcnow())
        )
        await self.db.commit()
        count = result.rowcount or 0
        logger.info(f"Cleaned up {count} expired email tokens")
        if count == 0:
            return TokenCleanupResult(
                success=True, deleted_count=0, message="No expired tokens to clean up",
            )
        return TokenCleanupResult(
            success=True, deleted_count=count,
            message=f"Successfully cleaned up {count} expired tokens",
        )

    # --- Internal ---

    async def _get(self, request_id: str) -> MentorRequest:
        result = await self.db.execute(
            select(MentorRequest)
            .where(MentorRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        request = result.scalar_one_or_none()
        if request is None:
            raise ResourceNotFoundError("Mentor request", request_id)
        return request

    async def _transition(
        self, request_id: str, actor: str, target: MentorRequestStatus | None, **fields,
    ) -> None:
        """Compare-and-swap from the actor's required status.

        Reaching a terminal status retires every outstanding action link for the request.
        """
        expected = required_status(actor)
        if target is None or not is_legal_transition(expected.value, target.value):
            raise InvalidStateError(
                f"Illegal {actor} transition from {expected.value}", expected.value,
            )
        result = await self.db.execute(
            update(MentorRequest)
            .where(MentorRequest.id == request_id)
            .where(MentorRequest.status == expected.value)
            .values(status=target.value, **fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateError("Request has already been processed")
        if target in TERMINAL_STATUSES:
            await self.db.execute(
                update(EmailToken)
                .where(EmailToken.request_id == request_id)
                .where(EmailToken.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )

    def _issue_action_link(
        self, request: MentorRequest, action: DecisionAction | None = None,
    ) -> str:
        """Signed link for the assigned mentor; bound to one action when given."""
        bound = action.value if action else None
        issued = self.signer.issue(
            PURPOSE_MENTOR_ACTION, request.id,
            timedelta(days=self.settings.mentor_token_days),
            mentor_email=request.mentor_email,
        )
        self.db.add(EmailToken(
            id=issued.jti,
            request_id=request.id,
            mentor_email=request.mentor_email,
            action=bound,
            expires_at=issued.expires_at,
        ))
        base = self.settings.app_url.rstrip("/")
        url = f"{base}/mentor/requests/{request.id}?token={issued.token}"
        return f"{url}&action={bound}" if bound else url


def _as_dict(record) -> dict:
    return {column.key: getattr(record, column.key) for column in record.__table__.columns}
