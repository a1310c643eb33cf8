"""
Admin routes - OTP login, profile and member review.

/v1/admin/login and /v1/admin/verify-otp are public; everything else
requires the bearer token issued by verify-otp.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_admin_auth_service,
    get_current_admin,
    get_membership_service,
)
from src.api.models import (
    AdminChangePasswordRequest,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProfileUpdateRequest,
    AdminResponse,
    AdminSessionResponse,
    AdminVerifyOtpRequest,
    ApproveRequest,
    ErrorResponse,
    MemberEnvelope,
    MemberListResponse,
    MemberResponse,
    MessageResponse,
    PaymentStatusRequest,
    RecordPaymentRequest,
    RejectRequest,
)
from src.domain.admin_auth import AdminAuthService
from src.domain.membership import MembershipService
from src.domain.ports import AdminRecord, MemberStatus

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid password"},
        404: {"model": ErrorResponse, "description": "Admin not found"},
        500: {"model": ErrorResponse, "description": "OTP email could not be sent"},
    },
    summary="Admin login, step 1: password",
    description="Checks the password and emails a short-lived 6-digit OTP.",
)
def login(
    request_data: AdminLoginRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> AdminLoginResponse:
    admin_id = service.login(request_data.admin_id, request_data.password)
    return AdminLoginResponse(
        message=(
            "OTP sent to admin's registered email. "
            f"It expires in {service.otp_ttl_minutes} minutes."
        ),
        admin_id=admin_id,
    )


@router.post(
    "/verify-otp",
    response_model=AdminSessionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No OTP requested"},
        401: {"model": ErrorResponse, "description": "Invalid OTP"},
        404: {"model": ErrorResponse, "description": "Admin not found"},
        410: {"model": ErrorResponse, "description": "OTP expired"},
    },
    summary="Admin login, step 2: OTP",
)
def verify_otp(
    request_data: AdminVerifyOtpRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> AdminSessionResponse:
    session = service.verify_otp(request_data.admin_id, request_data.otp)
    return AdminSessionResponse(
        message="OTP verified. Admin logged in successfully!",
        admin=AdminResponse.from_record(session.admin),
        token=session.token,
        expires_in=session.expires_in,
    )


@router.get("/profile", response_model=AdminResponse, summary="Current admin profile")
def get_profile(admin: AdminRecord = Depends(get_current_admin)) -> AdminResponse:
    return AdminResponse.from_record(admin)


@router.put(
    "/profile",
    response_model=AdminResponse,
    responses={409: {"model": ErrorResponse, "description": "Email already in use"}},
    summary="Update current admin profile",
)
def update_profile(
    request_data: AdminProfileUpdateRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> AdminResponse:
    updated = service.update_profile(admin.id, name=request_data.name, email=request_data.email)
    return AdminResponse.from_record(updated)


@router.post(
    "/change-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Passwords missing, mismatched or too short"},
        401: {"model": ErrorResponse, "description": "Current password is incorrect"},
    },
    summary="Change current admin password",
)
def change_password(
    request_data: AdminChangePasswordRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> MessageResponse:
    service.change_password(
        admin.id,
        request_data.current_password,
        request_data.new_password,
        request_data.confirm_password,
    )
    return MessageResponse(message="Password changed successfully!")


@router.get("/members", response_model=MemberListResponse, summary="List members")
def list_members(
    status_filter: MemberStatus | None = Query(None, alias="status"),
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MemberListResponse:
    members = service.list_members(status_filter)
    return MemberListResponse(
        count=len(members), members=[MemberResponse.from_record(m) for m in members]
    )


@router.put(
    "/approve/{member_id}",
    response_model=MemberEnvelope,
    responses={
        400: {"model": ErrorResponse, "description": "Missing ID, already approved or unverified"},
        404: {"model": ErrorResponse, "description": "Member not found"},
        409: {
            "model": ErrorResponse,
            "description": "Unique ID already in use, or the email was registered again",
        },
    },
    summary="Approve a registration and issue credentials",
)
def approve(
    member_id: UUID,
    request_data: ApproveRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MemberEnvelope:
    member = service.approve(
        member_id, request_data.unique_id, reviewer=admin.admin_id, notes=request_data.admin_notes
    )
    return MemberEnvelope(
        message="Member approved. Credentials have been emailed.",
        member=MemberResponse.from_record(member),
    )


@router.put(
    "/reject/{member_id}",
    response_model=MemberEnvelope,
    responses={
        400: {"model": ErrorResponse, "description": "Notes missing or already rejected"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
    summary="Reject a registration",
)
def reject(
    member_id: UUID,
    request_data: RejectRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MemberEnvelope:
    member = service.reject(member_id, request_data.admin_notes, reviewer=admin.admin_id)
    return MemberEnvelope(message="Member rejected.", member=MemberResponse.from_record(member))


@router.put(
    "/members/{member_id}/payment",
    response_model=MemberEnvelope,
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
    summary="Set or toggle a member's payment status",
)
def set_payment_status(
    member_id: UUID,
    request_data: PaymentStatusRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MemberEnvelope:
    member = service.set_payment_status(member_id, request_data.is_payment_done)
    label = "marked as paid" if member.is_payment_done else "marked as unpaid"
    return MemberEnvelope(
        message=f"Payment status {label}", member=MemberResponse.from_record(member)
    )


@router.post(
    "/members/{member_id}/payments",
    response_model=MemberEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
    summary="Record a membership payment",
)
def record_payment(
    member_id: UUID,
    request_data: RecordPaymentRequest,
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MemberEnvelope:
    member = service.record_payment(
        member_id, request_data.payment_id, request_data.amount, request_data.paid_at
    )
    return MemberEnvelope(message="Payment recorded", member=MemberResponse.from_record(member))


@router.delete(
    "/members/{member_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Member not found"}},
    summary="Delete a member and their stored document",
)
def delete_member(
    member_id: UUID,
    admin: AdminRecord = Depends(get_current_admin),
    service: MembershipService = Depends(get_membership_service),
) -> MessageResponse:
    service.delete_member(member_id)
    return MessageResponse(message="Member deleted successfully")
