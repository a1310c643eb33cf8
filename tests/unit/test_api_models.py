"""
Unit tests for API request/response models.

Tests Pydantic validation of request bodies, camelCase aliases and the
member projection that hides credential material.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.api.models import (
    ApproveRequest,
    ChangePasswordRequest,
    MemberResponse,
    ProfileUpdateRequest,
    RecordPaymentRequest,
    VerifyOtpRequest,
    parse_form_email,
    parse_string_list,
)
from src.domain.exceptions import InvalidInput
from src.domain.ports import MemberRecord, MemberStatus, PaymentEntry


class TestParseStringList:
    """Tests for list-valued form fields."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, []),
            ("", []),
            ("md", ["md"]),
            ("md, dm", ["md", "dm"]),
            ('["md", "dm"]', ["md", "dm"]),
            ("[md, dm]", ["md", "dm"]),
            (["md", " dm "], ["md", "dm"]),
        ],
    )
    def test_accepted_shapes(self, raw: str | list[str] | None, expected: list[str]) -> None:
        assert parse_string_list(raw) == expected


class TestParseFormEmail:
    """Tests for the multipart email field."""

    def test_accepts_valid_address(self) -> None:
        assert parse_form_email(" a@x.com ") == "a@x.com"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_passes_through(self, value: str | None) -> None:
        assert parse_form_email(value) == value

    @pytest.mark.parametrize("value", ["plainaddress", "a@", "a@@x.com"])
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(InvalidInput, match="Invalid email address"):
            parse_form_email(value)


class TestVerifyOtpRequest:
    def test_valid(self) -> None:
        request = VerifyOtpRequest(email="user@example.com", otp="123456")
        assert request.otp == "123456"

    @pytest.mark.parametrize("otp", ["12345", "1234567", "12a456", ""])
    def test_otp_must_be_six_digits(self, otp: str) -> None:
        with pytest.raises(ValidationError):
            VerifyOtpRequest(email="user@example.com", otp=otp)

    def test_invalid_email_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            VerifyOtpRequest(email="not-an-email", otp="123456")
        assert "email" in str(exc_info.value)


class TestCamelCaseAliases:
    def test_change_password_by_alias(self) -> None:
        request = ChangePasswordRequest.model_validate(
            {"uniqueId": "OSOO250001", "currentPassword": "Tmp", "newPassword": "NewPass1!"}
        )
        assert request.unique_id == "OSOO250001"
        assert request.new_password == "NewPass1!"

    def test_new_password_length_capped(self) -> None:
        with pytest.raises(ValidationError):
            ChangePasswordRequest.model_validate(
                {"uniqueId": "OSOO250001", "currentPassword": "Tmp", "newPassword": "x" * 73}
            )

    def test_approve_fields_optional(self) -> None:
        request = ApproveRequest.model_validate({})
        assert request.unique_id is None
        assert request.admin_notes is None

    def test_record_payment(self) -> None:
        request = RecordPaymentRequest.model_validate(
            {"paymentId": "pay_1", "paymentAmount": 1500, "paymentDate": "2025-01-02T00:00:00Z"}
        )
        assert request.amount == 1500.0
        assert request.paid_at == datetime(2025, 1, 2, tzinfo=timezone.utc)

    def test_record_payment_rejects_negative_amount(self) -> None:
        with pytest.raises(ValidationError):
            RecordPaymentRequest.model_validate({"paymentId": "pay_1", "paymentAmount": -5})

    def test_profile_update_phone_pattern(self) -> None:
        with pytest.raises(ValidationError):
            ProfileUpdateRequest(phone="12345")


class TestMemberResponse:
    """Tests for the member projection."""

    def _member(self) -> MemberRecord:
        return MemberRecord(
            name="Dr. A",
            email="a@x.com",
            phone="9876543210",
            document_type="aadhaar",
            document_number="1234",
            document_url="https://files.example.org/doc",
            status=MemberStatus.APPROVED,
            otp_verified=True,
            is_verified=True,
            unique_member_id="OSOO250001",
            temp_password_hash="$2b$hash",
            otp_hash="$2b$otp",
            payment_history=[
                PaymentEntry(
                    payment_id="pay_1",
                    paid_at=datetime(2025, 1, 2, tzinfo=timezone.utc),
                    amount=1500.0,
                )
            ],
            id=uuid4(),
        )

    def test_serializes_camel_case(self) -> None:
        data = MemberResponse.from_record(self._member()).model_dump(by_alias=True, mode="json")

        assert data["uniqueId"] == "OSOO250001"
        assert data["documentNo"] == "1234"
        assert data["documentImage"] == "https://files.example.org/doc"
        assert data["status"] == "approved"
        assert data["isOtpVerified"] is True
        assert data["paymentHistory"][0]["paymentId"] == "pay_1"
        assert data["paymentHistory"][0]["paymentAmount"] == 1500.0

    def test_hides_credential_material(self) -> None:
        data = MemberResponse.from_record(self._member()).model_dump(by_alias=True)
        text = str(data)

        assert "$2b$" not in text
        assert not any("hash" in key.lower() for key in data)
        assert not any("password" in key.lower() for key in data)
