"""Notification Side Effect — best-effort email delivery and in-app notification records.

Invariants:
    - deliver() never raises and is called only after the state change is committed
    - At most one send attempt per email, no retries
    - In-app notifications are added to the caller's unit of work (committed with the transition)

Design Decisions:
    - Synchronous best-effort over an outbox: the outcome is reported inside the
      operation result and a failed send never downgrades it
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tbi_portal.core.domain_types import DeliveryReport, NotificationType, OutgoingEmail
from tbi_portal.core.repository_protocols import EmailSender
from tbi_portal.models.mentor_request import MentorRequest
from tbi_portal.models.notification import Notification
from tbi_portal.schemas.application import EmailResult

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, db: AsyncSession, mailer: EmailSender):
        self.db = db
        self.mailer = mailer

    async def deliver(self, email: OutgoingEmail) -> DeliveryReport:
        try:
            report = await self.mailer.send(email)
        except Exception as e:
            logger.error(f"Email sender raised: {e}", exc_info=True, extra={"email_to": email.to})
            return DeliveryReport(
                success=False, message=f"Exception during email sending: {e}", error=type(e).__name__,
            )
        if not report.success:
            logger.warning(
                f"Email not delivered: {report.message}",
                extra={"email_to": email.to, "error_code": report.error},
            )
        return report

    def add_request_notification(
        self, request: MentorRequest, type: NotificationType, title: str, message: str,
    ) -> Notification:
        """Stage an in-app notification for the requesting user."""
        notification = Notification(
            user_id=request.user_id,
            type=type.value,
            title=title,
            message=message,
            mentor_id=request.mentor_id,
            mentor_name=request.mentor_name,
            request_id=request.id,
        )
        self.db.add(notification)
        return notification


def email_result(email: OutgoingEmail, report: DeliveryReport) -> EmailResult:
    detail = report.message if report.error is None else f"{report.message} ({report.error})"
    return EmailResult(
        to=email.to, subject=email.subject, body=email.text,
        sent=report.success, detail=detail,
    )
