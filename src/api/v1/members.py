"""
Member routes - registration, OTP verification, login and profile.

Public endpoints under /v1/member. Domain errors are translated to HTTP
responses by the handlers in src.api.errors.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.api.dependencies import get_membership_service
from src.api.models import (
    ChangePasswordRequest,
    ErrorResponse,
    MemberEnvelope,
    MemberLoginRequest,
    MemberLoginResponse,
    MemberResponse,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterResponse,
    ResendOtpRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
    parse_form_email,
    parse_string_list,
)
from src.domain.membership import (
    DocumentUpload,
    MembershipService,
    ProfileUpdate,
    RegistrationSubmission,
)

router = APIRouter(prefix="/member", tags=["member"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Already approved or awaiting review"},
        500: {"model": ErrorResponse, "description": "OTP email could not be sent"},
    },
    summary="Submit a membership registration",
    description="Multipart form with the registrant's details and identity document. "
    "A short-lived 6-digit OTP is emailed to the registrant. "
    "Submitting again before verifying re-issues the OTP.",
)
def register(
    name: str | None = Form(None),
    email: str | None = Form(None),
    phone: str | None = Form(None),
    document_type: str | None = Form(None, alias="documentType"),
    document_no: str | None = Form(None, alias="documentNo"),
    speciality: str | None = Form(None),
    qualification: str | None = Form(None),
    agree_with_terms: bool = Form(False, alias="agreeWithTerms"),
    document_image: UploadFile | None = File(None, alias="documentImage"),
    service: MembershipService = Depends(get_membership_service),
) -> RegisterResponse:
    submission = RegistrationSubmission(
        name=name,
        email=parse_form_email(email),
        phone=phone,
        document_type=document_type,
        document_number=document_no,
        speciality=speciality or None,
        qualifications=parse_string_list(qualification),
        terms_accepted=agree_with_terms,
    )

    document = None
    if document_image is not None:
        document = DocumentUpload(
            content=document_image.file.read(),
            filename=document_image.filename or "document",
            content_type=document_image.content_type,
        )

    normalized_email = service.register(submission, document)
    return RegisterResponse(
        message="OTP sent to your email. Please verify to complete registration.",
        email=normalized_email,
    )


@router.post(
    "/verify-otp",
    response_model=VerifyOtpResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No OTP outstanding"},
        401: {"model": ErrorResponse, "description": "Invalid OTP"},
        404: {"model": ErrorResponse, "description": "No pending registration"},
        410: {"model": ErrorResponse, "description": "OTP expired"},
    },
    summary="Verify registration OTP",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: MembershipService = Depends(get_membership_service),
) -> VerifyOtpResponse:
    member = service.verify_otp(request_data.email, request_data.otp)
    return VerifyOtpResponse(
        message="Email verified. Your application has been submitted for admin review.",
        status=member.status.value,
    )


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "No unverified registration"}},
    summary="Resend registration OTP",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: MembershipService = Depends(get_membership_service),
) -> MessageResponse:
    service.resend_otp(request_data.email)
    return MessageResponse(message="OTP resent to your email.")


@router.post(
    "/login",
    response_model=MemberLoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "Member not found or not approved"},
    },
    summary="Member login with unique member ID",
)
def login(
    request_data: MemberLoginRequest,
    service: MembershipService = Depends(get_membership_service),
) -> MemberLoginResponse:
    result = service.login(request_data.unique_id, request_data.password)
    if result.requires_password_change:
        message = "Login successful with temporary password. Please change your password."
    else:
        message = "Login successful!"
    return MemberLoginResponse(
        message=message,
        member=MemberResponse.from_record(result.member),
        requires_password_change=result.requires_password_change,
    )


@router.post(
    "/change-password",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Current password is incorrect"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
    summary="Replace the temporary or current password",
)
def change_password(
    request_data: ChangePasswordRequest,
    service: MembershipService = Depends(get_membership_service),
) -> MessageResponse:
    service.change_password(
        request_data.unique_id, request_data.current_password, request_data.new_password
    )
    return MessageResponse(message="Password changed successfully!")


@router.get(
    "/profile/{unique_id}",
    response_model=MemberResponse,
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
    summary="Get an approved member's profile",
)
def get_profile(
    unique_id: str,
    service: MembershipService = Depends(get_membership_service),
) -> MemberResponse:
    return MemberResponse.from_record(service.get_profile(unique_id))


@router.put(
    "/profile/{unique_id}",
    response_model=MemberEnvelope,
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
    summary="Update an approved member's profile",
)
def update_profile(
    unique_id: str,
    request_data: ProfileUpdateRequest,
    service: MembershipService = Depends(get_membership_service),
) -> MemberEnvelope:
    changes = ProfileUpdate(
        name=request_data.name,
        phone=request_data.phone,
        speciality=request_data.speciality,
        qualifications=(
            parse_string_list(request_data.qualification)
            if request_data.qualification is not None
            else None
        ),
    )
    member = service.update_profile(unique_id, changes)
    return MemberEnvelope(
        message="Profile updated successfully!", member=MemberResponse.from_record(member)
    )
