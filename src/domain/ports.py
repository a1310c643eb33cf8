"""
Port interfaces - Domain records and Protocol definitions for infrastructure.

This module defines the records the domain works on and the interfaces
(ports) it requires from infrastructure. Adapters implement these protocols
through structural subtyping.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol
from uuid import UUID


class MemberStatus(str, Enum):
    """
    Member lifecycle status.

    Combined with ``otp_verified`` this gives the registration states:
    - PENDING + not otp_verified: pending-unverified (OTP outstanding)
    - PENDING + otp_verified: pending-review (waiting for an admin)
    - APPROVED: credentials issued, member may log in
    - REJECTED: admin declined; the email may register again
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(str, Enum):
    """Identity document accepted with a registration."""

    AADHAAR = "aadhaar"
    PAN = "pan"
    PASSPORT = "passport"
    VOTER_ID = "voter_id"
    DRIVING_LICENCE = "driving_licence"
    MEDICAL_REGISTRATION = "medical_registration"


class Speciality(str, Enum):
    SURGICAL_ONCOLOGY = "surgical_oncology"
    RADIATION_ONCOLOGY = "radiation_oncology"
    MEDICAL_ONCOLOGY = "medical_oncology"
    PAEDIATRIC_ONCOLOGY = "paediatric_oncology"
    HAEMATOLOGY_HAEMATOONCOLOGY = "haematology_haematooncology"
    GYNAECOLOGIC_ONCOLOGY = "gynaecologic_oncology"
    HEAD_NECK_ONCOLOGY = "head_neck_oncology"
    ONCOPATHOLOGY = "oncopathology"
    URO_ONCOLOGY = "uro_oncology"
    RADIOLOGY = "radiology"
    NUCLEAR_MEDICINE = "nuclear_medicine"
    PALLIATIVE_CARE = "palliative_care"
    OTHERS = "others"


class Qualification(str, Enum):
    DM = "dm"
    MCH = "mch"
    MD = "md"
    MS = "ms"
    FELLOWSHIP = "fellowship"
    DRNB = "drnb"
    DNB = "dnb"
    OTHERS = "others"


@dataclass
class PaymentEntry:
    """One membership fee payment."""

    payment_id: str
    paid_at: datetime
    amount: float


@dataclass
class MemberRecord:
    """
    A registrant, from first submission through approval and beyond.

    Invariants maintained by MembershipService:
    - otp_hash and otp_expires_at are both set or both None
    - unique_member_id is set once the record has been approved
    - an approved record is otp_verified and holds exactly one of
      temp_password_hash / password_hash
    """

    name: str
    email: str
    phone: str
    document_type: str
    document_number: str
    document_url: str
    document_ref: str | None = None
    terms_accepted: bool = False
    terms_accepted_at: datetime | None = None
    speciality: str | None = None
    qualifications: list[str] = field(default_factory=list)
    status: MemberStatus = MemberStatus.PENDING
    otp_verified: bool = False
    otp_hash: str | None = None
    otp_expires_at: datetime | None = None
    temp_password_hash: str | None = None
    password_hash: str | None = None
    is_verified: bool = False
    unique_member_id: str | None = None
    is_payment_done: bool = False
    payment_history: list[PaymentEntry] = field(default_factory=list)
    admin_notes: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class AdminRecord:
    """A staff operator who reviews registrations."""

    name: str
    email: str
    admin_id: str
    password_hash: str
    otp_hash: str | None = None
    otp_expires_at: datetime | None = None
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class StoredDocument:
    """Result of a document upload: public URL plus a deletable reference."""

    url: str
    ref: str


class MemberRepository(Protocol):
    """Port interface for member persistence."""

    def create(self, member: MemberRecord) -> MemberRecord:
        """
        Insert a new member record.

        Returns:
            The stored record with id and timestamps assigned

        Raises:
            Conflict: If a non-rejected record already holds the email
        """
        ...

    def save(self, member: MemberRecord) -> None:
        """
        Overwrite the stored record with the given state (last write wins).

        Raises:
            Conflict: If the unique member id is already taken
        """
        ...

    def get(self, member_id: UUID) -> MemberRecord | None:
        """Fetch a record by its internal id."""
        ...

    def find_active_by_email(self, email: str) -> MemberRecord | None:
        """Fetch the non-rejected record for a normalized email, if any."""
        ...

    def find_by_unique_id(self, unique_member_id: str) -> MemberRecord | None:
        """Fetch the record holding an issued member id, whatever its status."""
        ...

    def list(self, status: MemberStatus | None = None) -> list[MemberRecord]:
        """List records newest first, optionally filtered by status."""
        ...

    def delete(self, member_id: UUID) -> bool:
        """Delete a record. Returns False if nothing was deleted."""
        ...


class AdminRepository(Protocol):
    """Port interface for admin persistence."""

    def create(self, admin: AdminRecord) -> AdminRecord:
        ...

    def save(self, admin: AdminRecord) -> None:
        ...

    def get(self, admin_pk: UUID) -> AdminRecord | None:
        ...

    def find_by_admin_id(self, admin_id: str) -> AdminRecord | None:
        ...

    def find_by_email(self, email: str) -> AdminRecord | None:
        ...


class EmailSender(Protocol):
    """
    Port interface for email delivery.

    Implementations raise on delivery failure; each call site decides
    whether that failure is fatal or best-effort.
    """

    def send_otp(self, email: str, code: str, expires_in_minutes: int) -> None:
        """Send a one-time password."""
        ...

    def send_review_pending(self, email: str, name: str) -> None:
        """Tell a registrant their application is waiting for admin review."""
        ...

    def send_approval(
        self, email: str, name: str, unique_member_id: str, temporary_password: str
    ) -> None:
        """Send the member id and temporary password to an approved member."""
        ...

    def send_rejection(self, email: str, name: str, notes: str) -> None:
        """Tell a registrant their application was rejected."""
        ...

    def send_password_changed(self, email: str, name: str) -> None:
        """Confirm a member password change."""
        ...


class DocumentStorage(Protocol):
    """Port interface for storing uploaded identity documents."""

    def upload(
        self, content: bytes, filename: str, content_type: str | None = None
    ) -> StoredDocument:
        ...

    def delete(self, ref: str) -> None:
        ...


class TokenIssuer(Protocol):
    """Port interface for signed admin session tokens."""

    expires_in_seconds: int

    def issue(self, admin: AdminRecord) -> str:
        ...

    def decode(self, token: str) -> dict[str, Any]:
        """
        Validate a token and return its claims.

        Raises:
            Unauthorized: If the token is malformed, tampered with or expired
        """
        ...
