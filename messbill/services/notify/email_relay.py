"""
Email Relay Service

Sends each member a plain-text copy of their bill through the SMTP2GO
HTTP API.

IMPORTANT BOUNDARIES:
1. This service only formats and transmits; it never recalculates
2. A failed send never affects the calculation it reports on
3. Only transport failures are retried; a rejected request is not
"""

from typing import Optional

import requests
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from messbill.config import get_settings
from messbill.models.notification import BillEmailRequest, EmailSendResult


logger = structlog.get_logger(__name__)


BODY_TEMPLATE = """Hello {member_name},

Your mess bill for {month} has been calculated.

{individual_bill}

{overview}

Total Amount: Rs. {total_amount}

Thank you for your cooperation.

Best regards,
{signature}"""


class NotificationError(Exception):
    """Base exception for notification errors."""
    pass


class EmailConfigurationError(NotificationError):
    """Relay credentials are missing."""
    pass


class EmailSendError(NotificationError):
    """The relay refused or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EmailRelayService:
    """
    Thin client for the email relay.

    Usage:
        service = EmailRelayService()
        result = await service.send_bill(request)
    """

    def __init__(
        self,
        settings=None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().email_relay
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def build_subject(self, request: BillEmailRequest) -> str:
        return f"Mess Bill - {request.month}"

    def build_body(self, request: BillEmailRequest) -> str:
        return BODY_TEMPLATE.format(
            member_name=request.member_name,
            month=request.month,
            individual_bill=request.individual_bill,
            overview=request.overview,
            total_amount=request.total_amount,
            signature=self._settings.signature,
        )

    def build_payload(self, request: BillEmailRequest) -> dict:
        return {
            "api_key": self._settings.api_key,
            "to": [request.to],
            "sender": self._settings.sender_email,
            "subject": self.build_subject(request),
            "text_body": self.build_body(request),
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
    )
    def _post(self, payload: dict) -> requests.Response:
        return self._session.post(
            self._settings.endpoint,
            json=payload,
            timeout=self._settings.timeout_seconds,
        )

    async def send_bill(self, request: BillEmailRequest) -> EmailSendResult:
        """
        Send one bill email.

        Returns:
            EmailSendResult with success=True

        Raises:
            EmailConfigurationError: Sender or API key not configured
            EmailSendError: Relay unreachable or returned an error status
        """
        if not self.is_configured:
            raise EmailConfigurationError("Email relay credentials not configured")

        try:
            response = self._post(self.build_payload(request))
        except requests.RequestException as e:
            logger.error("email_send_failed", to=request.to, error=str(e))
            raise EmailSendError(f"Failed to send email: {e}") from e

        if not response.ok:
            logger.error(
                "email_send_failed",
                to=request.to,
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise EmailSendError("Failed to send email", status_code=response.status_code)

        logger.info("email_sent", to=request.to, month=request.month)
        return EmailSendResult(success=True, message="Email sent successfully")
