"""
Resend email sender adapter - Implements EmailSender protocol.

Delivers membership emails through the Resend HTTP API. Delivery errors
propagate to the caller; the domain service decides per call site whether
a failed email is fatal.
"""

import logging

import resend

from . import templates

logger = logging.getLogger(__name__)


class ResendEmailSender:
    """Implements EmailSender protocol via the Resend SDK."""

    def __init__(self, api_key: str, sender: str) -> None:
        """
        Args:
            api_key: Resend API key
            sender: From header, e.g. "OSOO <noreply@example.org>"
        """
        resend.api_key = api_key
        self._sender = sender

    def send_otp(self, email: str, code: str, expires_in_minutes: int) -> None:
        self._send(email, *templates.otp_email(code, expires_in_minutes))

    def send_review_pending(self, email: str, name: str) -> None:
        self._send(email, *templates.review_pending_email(name))

    def send_approval(
        self, email: str, name: str, unique_member_id: str, temporary_password: str
    ) -> None:
        self._send(email, *templates.approval_email(name, unique_member_id, temporary_password))

    def send_rejection(self, email: str, name: str, notes: str) -> None:
        self._send(email, *templates.rejection_email(name, notes))

    def send_password_changed(self, email: str, name: str) -> None:
        self._send(email, *templates.password_changed_email(name))

    def _send(self, to_email: str, subject: str, html_content: str) -> None:
        params: resend.Emails.SendParams = {
            "from": self._sender,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        result = resend.Emails.send(params)
        logger.info("Email sent to %s, id: %s", to_email, result["id"])
