"""
Domain layer - Pure business logic with zero framework imports.

This package contains the member registration state machine and the
admin authentication flow. It defines its own port interfaces for
infrastructure abstraction (record store, email, document storage,
session tokens).
"""

from .admin_auth import AdminAuthService, AdminSession
from .exceptions import (
    Conflict,
    DeliveryError,
    Expired,
    InvalidInput,
    InvalidState,
    MembershipError,
    NotFound,
    Unauthorized,
)
from .membership import (
    DocumentUpload,
    LoginResult,
    MembershipService,
    ProfileUpdate,
    RegistrationSubmission,
)
from .ports import (
    AdminRecord,
    AdminRepository,
    DocumentStorage,
    EmailSender,
    MemberRecord,
    MemberRepository,
    MemberStatus,
    TokenIssuer,
)

__all__ = [
    "AdminAuthService",
    "AdminRecord",
    "AdminRepository",
    "AdminSession",
    "Conflict",
    "DeliveryError",
    "DocumentStorage",
    "DocumentUpload",
    "EmailSender",
    "Expired",
    "InvalidInput",
    "InvalidState",
    "LoginResult",
    "MemberRecord",
    "MemberRepository",
    "MemberStatus",
    "MembershipError",
    "MembershipService",
    "NotFound",
    "ProfileUpdate",
    "RegistrationSubmission",
    "TokenIssuer",
    "Unauthorized",
]
