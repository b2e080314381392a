"""Resend Email Client — transactional email over the Resend REST API.

Invariants:
    - send() never raises: every outcome comes back as a DeliveryReport
    - Missing API key: the would-be email is logged and a soft failure returned (RESEND_API_KEY_MISSING)
    - Exactly one HTTP attempt per call, no retries

Design Decisions:
    - httpx over the vendor SDK: async-native, and tests swap in httpx.MockTransport
    - One AsyncClient per send: operations send at most a handful of emails
"""

import logging

import httpx

from tbi_portal.core.domain_types import DeliveryReport, OutgoingEmail

logger = logging.getLogger(__name__)

API_KEY_MISSING = "RESEND_API_KEY_MISSING"


class ResendEmailSender:
    """Implements EmailSender (core/repository_protocols.py)."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        api_url: str = "https://api.resend.com",
        timeout_seconds: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def send(self, email: OutgoingEmail) -> DeliveryReport:
        if not self.api_key:
            logger.warning(
                "Email not sent: RESEND_API_KEY missing. Would-be email follows.\n"
                f"To: {email.to}\nSubject: {email.subject}\nBody:\n{email.text}",
                extra={"email_to": email.to, "error_code": API_KEY_MISSING},
            )
            return DeliveryReport(
                success=False,
                message="Email sending disabled: RESEND_API_KEY not found.",
                error=API_KEY_MISSING,
            )

        payload = {
            "from": self.from_email,
            "to": [email.to],
            "subject": email.subject,
            "text": email.text,
        }
        if email.html:
            payload["html"] = email.html

        try:
            async with httpx.AsyncClient(
                base_url=self.api_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(
                f"Email transport error: {e}",
                extra={"email_to": email.to},
            )
            return DeliveryReport(
                success=False,
                message=f"Exception during email sending: {e}",
                error=type(e).__name__,
            )

        if response.is_success:
            message_id = _json_field(response, "id")
            logger.info(
                f"Email sent via Resend (id={message_id})",
                extra={"email_to": email.to},
            )
            return DeliveryReport(
                success=True, message=f"Email sent successfully to {email.to} via Resend.",
            )

        detail = _json_field(response, "message") or response.text or "Unknown Resend API error"
        logger.error(
            f"Resend API error {response.status_code}: {detail}",
            extra={"email_to": email.to, "error_code": str(response.status_code)},
        )
        return DeliveryReport(
            success=False,
            message=f"Failed to send email via Resend: {detail}",
            error=f"HTTP {response.status_code}",
        )


def _json_field(response: httpx.Response, key: str) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        value = body.get(key)
        return str(value) if value is not None else None
    return None
