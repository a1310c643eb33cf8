"""
Unit tests for ResendEmailSender adapter and email templates.

resend.Emails.send is patched; no network calls are made.
"""

from unittest.mock import Mock

import pytest
import resend

from src.adapters.notifications import templates
from src.adapters.notifications.resend_sender import ResendEmailSender


@pytest.fixture
def send_mock(monkeypatch: pytest.MonkeyPatch) -> Mock:
    mock = Mock(return_value={"id": "email_123"})
    monkeypatch.setattr(resend.Emails, "send", mock)
    return mock


@pytest.fixture
def sender() -> ResendEmailSender:
    return ResendEmailSender(api_key="re_test", sender="OSOO <noreply@osoo.org>")


class TestResendEmailSender:
    def test_sets_api_key(self, sender: ResendEmailSender) -> None:
        assert resend.api_key == "re_test"

    def test_send_otp_params(self, sender: ResendEmailSender, send_mock: Mock) -> None:
        sender.send_otp("user@example.com", "482913", 10)

        params = send_mock.call_args.args[0]
        assert params["from"] == "OSOO <noreply@osoo.org>"
        assert params["to"] == ["user@example.com"]
        assert params["subject"] == "Your Odisha Society of Oncology OTP"
        assert "482913" in params["html"]
        assert "10 minutes" in params["html"]

    def test_send_approval_includes_credentials(
        self, sender: ResendEmailSender, send_mock: Mock
    ) -> None:
        sender.send_approval("user@example.com", "Dr. Das", "OSOO250001", "Abc123xyz9")

        params = send_mock.call_args.args[0]
        assert params["subject"] == "Your membership has been approved"
        assert "OSOO250001" in params["html"]
        assert "Abc123xyz9" in params["html"]

    @pytest.mark.parametrize(
        ("method", "args", "subject"),
        [
            ("send_review_pending", ("Dr. Das",), "Membership application submitted for review"),
            ("send_rejection", ("Dr. Das", "Blurry scan"), "Membership application update"),
            ("send_password_changed", ("Dr. Das",), "Your password was changed"),
        ],
    )
    def test_subjects(
        self,
        sender: ResendEmailSender,
        send_mock: Mock,
        method: str,
        args: tuple,
        subject: str,
    ) -> None:
        getattr(sender, method)("user@example.com", *args)

        assert send_mock.call_args.args[0]["subject"] == subject

    def test_send_errors_propagate(
        self, sender: ResendEmailSender, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(resend.Emails, "send", Mock(side_effect=ConnectionError("down")))

        with pytest.raises(ConnectionError):
            sender.send_otp("user@example.com", "482913", 10)


class TestTemplates:
    def test_user_text_is_escaped(self) -> None:
        _, html = templates.rejection_email("<b>Mallory</b>", "<script>alert(1)</script>")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;Mallory&lt;/b&gt;" in html

    def test_layout_carries_organisation(self) -> None:
        _, html = templates.password_changed_email("Dr. Das")

        assert templates.ORGANISATION in html
        assert "Dr. Das" in html

    def test_review_pending_mentions_review(self) -> None:
        subject, html = templates.review_pending_email("Dr. Das")

        assert "review" in subject
        assert "submitted for review" in html
