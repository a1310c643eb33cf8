"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names on the wire are camelCase; Python attributes are snake_case.
"""

import json
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError

from src.domain.exceptions import InvalidInput
from src.domain.ports import AdminRecord, MemberRecord

_email_adapter = TypeAdapter(EmailStr)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def parse_string_list(value: str | list[str] | None) -> list[str]:
    """
    Parse a list-valued form field.

    Accepts a JSON-encoded array ('["md", "dm"]'), comma separated text
    ("md, dm"), a single value, or an already-parsed list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        items = value
    else:
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None
            items = decoded if isinstance(decoded, list) else text.strip("[]").split(",")
        else:
            items = text.split(",")
    return [str(item).strip().strip('"') for item in items if str(item).strip().strip('"')]


def parse_form_email(value: str | None) -> str | None:
    """
    Validate a form-encoded email the way JSON bodies validate EmailStr.

    Blank values pass through so the missing-field check can report them.
    """
    if value is None or not value.strip():
        return value
    try:
        return _email_adapter.validate_python(value.strip())
    except ValidationError:
        raise InvalidInput("Invalid email address") from None


# Member requests


class VerifyOtpRequest(CamelModel):
    email: EmailStr
    otp: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit one-time password",
    )


class ResendOtpRequest(CamelModel):
    email: EmailStr


class MemberLoginRequest(CamelModel):
    unique_id: str = Field(..., alias="uniqueId", min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    unique_id: str = Field(..., alias="uniqueId", min_length=1)
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=72)


class ProfileUpdateRequest(CamelModel):
    """Member-editable fields; anything else in the body is ignored."""

    name: str | None = None
    phone: str | None = Field(None, pattern=r"^[6-9]\d{9}$")
    speciality: str | None = None
    qualification: list[str] | str | None = None


# Admin requests


class AdminLoginRequest(CamelModel):
    admin_id: str = Field(..., alias="adminId", min_length=1)
    password: str = Field(..., min_length=1)


class AdminVerifyOtpRequest(CamelModel):
    admin_id: str = Field(..., alias="adminId", min_length=1)
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class ApproveRequest(CamelModel):
    unique_id: str | None = Field(None, alias="uniqueId")
    admin_notes: str | None = Field(None, alias="adminNotes")


class RejectRequest(CamelModel):
    admin_notes: str | None = Field(None, alias="adminNotes")


class PaymentStatusRequest(CamelModel):
    is_payment_done: bool | None = Field(None, alias="isPaymentDone")


class RecordPaymentRequest(CamelModel):
    payment_id: str = Field(..., alias="paymentId", min_length=1)
    amount: float = Field(..., alias="paymentAmount", ge=0)
    paid_at: datetime | None = Field(None, alias="paymentDate")


class AdminProfileUpdateRequest(CamelModel):
    name: str | None = None
    email: EmailStr | None = None


class AdminChangePasswordRequest(CamelModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")


# Responses


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    email: str


class VerifyOtpResponse(BaseModel):
    message: str
    status: str


class AdminLoginResponse(CamelModel):
    message: str
    admin_id: str = Field(..., alias="adminId")


class PaymentResponse(CamelModel):
    payment_id: str = Field(..., alias="paymentId")
    paid_at: datetime = Field(..., alias="paymentDate")
    amount: float = Field(..., alias="paymentAmount")


class MemberResponse(CamelModel):
    """Member projection without OTP or password material."""

    id: UUID | None
    unique_id: str | None = Field(None, alias="uniqueId")
    name: str
    email: str
    phone: str
    document_type: str = Field(..., alias="documentType")
    document_no: str = Field(..., alias="documentNo")
    document_image: str = Field(..., alias="documentImage")
    speciality: str | None = None
    qualification: list[str] = Field(default_factory=list)
    agree_with_terms: bool = Field(False, alias="agreeWithTerms")
    terms_agreed_at: datetime | None = Field(None, alias="termsAgreedAt")
    status: str
    is_otp_verified: bool = Field(False, alias="isOtpVerified")
    is_verified: bool = Field(False, alias="isVerified")
    is_payment_done: bool = Field(False, alias="isPaymentDone")
    payment_history: list[PaymentResponse] = Field(default_factory=list, alias="paymentHistory")
    admin_notes: str | None = Field(None, alias="adminNotes")
    admin_reviewed_at: datetime | None = Field(None, alias="adminReviewedAt")
    admin_reviewed_by: str | None = Field(None, alias="adminReviewedBy")
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")

    @classmethod
    def from_record(cls, member: MemberRecord) -> "MemberResponse":
        return cls(
            id=member.id,
            unique_id=member.unique_member_id,
            name=member.name,
            email=member.email,
            phone=member.phone,
            document_type=member.document_type,
            document_no=member.document_number,
            document_image=member.document_url,
            speciality=member.speciality,
            qualification=list(member.qualifications),
            agree_with_terms=member.terms_accepted,
            terms_agreed_at=member.terms_accepted_at,
            status=member.status.value,
            is_otp_verified=member.otp_verified,
            is_verified=member.is_verified,
            is_payment_done=member.is_payment_done,
            payment_history=[
                PaymentResponse(payment_id=p.payment_id, paid_at=p.paid_at, amount=p.amount)
                for p in member.payment_history
            ],
            admin_notes=member.admin_notes,
            admin_reviewed_at=member.reviewed_at,
            admin_reviewed_by=member.reviewed_by,
            created_at=member.created_at,
            updated_at=member.updated_at,
        )


class MemberLoginResponse(CamelModel):
    message: str
    member: MemberResponse
    requires_password_change: bool = Field(..., alias="requiresPasswordChange")


class MemberEnvelope(BaseModel):
    message: str
    member: MemberResponse


class MemberListResponse(BaseModel):
    count: int
    members: list[MemberResponse]


class AdminResponse(CamelModel):
    """Admin projection without password or OTP material."""

    id: UUID | None
    name: str
    email: str
    admin_id: str = Field(..., alias="adminId")
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")

    @classmethod
    def from_record(cls, admin: AdminRecord) -> "AdminResponse":
        return cls(
            id=admin.id,
            name=admin.name,
            email=admin.email,
            admin_id=admin.admin_id,
            created_at=admin.created_at,
            updated_at=admin.updated_at,
        )


class AdminSessionResponse(CamelModel):
    message: str
    admin: AdminResponse
    token: str
    expires_in: int = Field(..., alias="expiresIn")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
