"""Application Handlers — intake, listing, and the accept/reject saga for applicant submissions.

Invariants:
    - process_application never raises: every outcome is a ProcessApplicationResult
    - Pre-checks (action, existence, pending) run before any external call
    - Provisioning failure aborts with no mutation and no email
    - Account insert and submission status write share one commit; the status write is
      conditional on status = 'pending', so only one of two concurrent decisions wins
    - If that commit does not happen after provisioning, the provisioned identity is deleted
    - Email is attempted after the commit; its failure never downgrades status

Design Decisions:
    - Saga with a compensating delete over a distributed transaction: the identity
      provider is an external system with no transaction to join
    - Session opened by provisioning is signed out right away: the admin stays the actor
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.config import Settings
from tbi_portal.core.compose_emails import compose_acceptance_email, compose_rejection_email
from tbi_portal.core.credentials import generate_temporary_password
from tbi_portal.core.domain_types import (
    AccountId, AccountStatus, ApplicationAction, Role, SubmissionStatus,
)
from tbi_portal.core.enforce_application import (
    check_action_valid, check_submission_pending, next_status, success_message,
)
from tbi_portal.core.errors import (
    IdentityProviderError, InternalError, InvalidStateError, PortalError,
    ResourceNotFoundError, error_from_check,
)
from tbi_portal.core.onboarding import initial_progress
from tbi_portal.core.repository_protocols import EmailSender, IdentityProvider
from tbi_portal.db.base import utcnow
from tbi_portal.models.submission import Submission
from tbi_portal.models.user_account import UserAccount
from tbi_portal.schemas.application import ProcessApplicationResult, SubmissionCreate
from tbi_portal.services.action_guard import reported
from tbi_portal.services.notify import Notifier, email_result

logger = logging.getLogger(__name__)


class ApplicationHandlers:
    """Applicant submissions — intake and the one-time admin decision."""

    def __init__(
        self, db: AsyncSession, identity: IdentityProvider,
        mailer: EmailSender, settings: Settings,
    ):
        self.db = db
        self.identity = identity
        self.notifier = Notifier(db, mailer)
        self.settings = settings

    # --- Intake & queries ---

    async def submit_application(self, data: SubmissionCreate) -> Submission:
        submission = Submission(
            name=data.name,
            email=str(data.email).lower(),
            idea=data.idea,
            company_name=data.company_name,
            phone=data.phone,
            domain=data.domain,
            sector=data.sector,
            campus_status=data.campus_status.value,
            status=SubmissionStatus.PENDING.value,
        )
        self.db.add(submission)
        await self.db.commit()
        logger.info("Submission received", extra={"submission_id": submission.id})
        return submission

    async def list_submissions(
        self, status: str | None = None, campus_status: str | None = None,
    ) -> list[Submission]:
        query = select(Submission).order_by(Submission.submitted_at.desc())
        if status:
            query = query.where(Submission.status == status)
        if campus_status:
            query = query.where(Submission.campus_status == campus_status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_submission(self, submission_id: str) -> Submission:
        submission = await self._load(submission_id)
        if submission is None:
            raise ResourceNotFoundError("Submission", submission_id)
        return submission

    # --- Decision ---

    @reported(ProcessApplicationResult, "An unexpected error occurred while processing the application.")
    async def process_application(
        self, submission_id: str, action: str,
        applicant_name: str, applicant_email: str,
    ) -> ProcessApplicationResult:
        """Accept or reject a pending submission."""
        invalid = check_action_valid(action)
        if invalid:
            raise error_from_check(invalid)

        submission = await self.get_submission(submission_id)
        not_pending = check_submission_pending(submission.id, submission.status)
        if not_pending:
            raise error_from_check(not_pending)

        if ApplicationAction(action) == ApplicationAction.ACCEPT:
            return await self._accept(submission, applicant_name, applicant_email)
        return await self._reject(submission, applicant_name, applicant_email)

    async def _accept(
        self, submission: Submission, applicant_name: str, applicant_email: str,
    ) -> ProcessApplicationResult:
        submission_id = submission.id
        password = generate_temporary_password(self.settings.temporary_password_length)
        try:
            session = await self.identity.create_account(applicant_email, password)
        except IdentityProviderError as e:
            raise IdentityProviderError(
                f"Failed to create user account: {e.message}", e.provider_code,
            ) from e
        account_id = session.account_id

        try:
            await self.identity.sign_out(session.token)
        except PortalError as e:
            logger.warning(
                f"Could not revoke provisioning session: {e.message}",
                extra={"account_id": account_id},
            )

        try:
            self.db.add(UserAccount(
                id=account_id,
                email=session.email,
                name=applicant_name,
                role=Role.USER.value,
                status=AccountStatus.ACTIVE.value,
                submission_id=submission_id,
                email_notifications=True,
                **initial_progress(),
            ))
            await self._transition(
                submission_id, SubmissionStatus.ACCEPTED,
                account_id=account_id, temporary_password=password,
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            await self._compensate(account_id, submission_id)
            if isinstance(e, PortalError):
                raise
            logger.error(f"Acceptance write failed: {e}", exc_info=True)
            raise InternalError(
                "Failed to record the acceptance. The new account was removed; please retry.",
            ) from e

        logger.info(
            "Application accepted",
            extra={"submission_id": submission_id, "account_id": account_id},
        )
        email = compose_acceptance_email(
            applicant_name, applicant_email, password, self.settings.app_url,
        )
        report = await self.notifier.deliver(email)
        return ProcessApplicationResult(
            status="success",
            message=success_message(ApplicationAction.ACCEPT),
            email=email_result(email, report),
            account_id=account_id,
            temporary_password=password,
        )

    async def _reject(
        self, submission: Submission, applicant_name: str, applicant_email: str,
    ) -> ProcessApplicationResult:
        await self._transition(submission.id, next_status(ApplicationAction.REJECT))
        await self.db.commit()

        logger.info("Application rejected", extra={"submission_id": submission.id})
        email = compose_rejection_email(applicant_name, applicant_email)
        report = await self.notifier.deliver(email)
        return ProcessApplicationResult(
            status="success",
            message=success_message(ApplicationAction.REJECT),
            email=email_result(email, report),
        )

    # --- Internal ---

    async def _transition(self, submission_id: str, status: SubmissionStatus, **fields) -> None:
        """Compare-and-swap pending -> status; raises when another decision won."""
        result = await self.db.execute(
            update(Submission)
            .where(Submission.id == submission_id)
            .where(Submission.status == SubmissionStatus.PENDING.value)
            .values(status=status.value, processed_at=utcnow(), **fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateError(
                f"Submission {submission_id} has already been processed.",
            )

    async def _compensate(self, account_id: AccountId, submission_id: str) -> None:
        try:
            await self.identity.delete_account(account_id)
            logger.warning(
                "Acceptance rolled back; provisioned identity deleted",
                extra={"submission_id": submission_id, "account_id": account_id},
            )
        except Exception as e:
            logger.critical(
                f"Orphaned identity after failed acceptance: {e}",
                exc_info=True,
                extra={"submission_id": submission_id, "account_id": account_id},
            )

    async def _load(self, submission_id: str) -> Submission | None:
        result = await self.db.execute(
            select(Submission)
            .where(Submission.id == submission_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
