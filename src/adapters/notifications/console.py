"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging each message to stdout for local development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - OTPs and temporary passwords appear
    in the application log, so never use this in production.
    """

    def send_otp(self, email: str, code: str, expires_in_minutes: int) -> None:
        logger.info("[OTP] Email: %s Code: %s Expires: %s min", email, code, expires_in_minutes)

    def send_review_pending(self, email: str, name: str) -> None:
        logger.info("[REVIEW PENDING] Email: %s Name: %s", email, name)

    def send_approval(
        self, email: str, name: str, unique_member_id: str, temporary_password: str
    ) -> None:
        logger.info(
            "[APPROVED] Email: %s Name: %s Member ID: %s Temporary password: %s",
            email,
            name,
            unique_member_id,
            temporary_password,
        )

    def send_rejection(self, email: str, name: str, notes: str) -> None:
        logger.info("[REJECTED] Email: %s Name: %s Notes: %s", email, name, notes)

    def send_password_changed(self, email: str, name: str) -> None:
        logger.info("[PASSWORD CHANGED] Email: %s Name: %s", email, name)
