"""
Membership domain service - Member registration state machine.

This module contains the core business logic for member registration,
OTP verification, admin review and member credentials.

Registration State Machine
==========================

States (status + otp_verified):
- pending-unverified: status=pending, otp_verified=False (OTP outstanding)
- pending-review:     status=pending, otp_verified=True  (awaiting admin)
- approved:           credentials issued, member may log in
- rejected:           admin declined the application

Transitions:
    (none)             -> pending-unverified  (register)
    pending-unverified -> pending-unverified  (register again / resend OTP)
    pending-unverified -> pending-review      (correct OTP before expiry)
    pending-review     -> approved            (admin approve)
    pending / approved -> rejected            (admin reject)
    rejected           -> (new record) pending-unverified  (register again)

Notification policy per call site:
- OTP email (register, resend): must succeed, failure raises DeliveryError
  after the record has been written.
- Review-pending, approval, rejection and password-changed emails: best
  effort, failures are logged and the state change stands.

There is no OTP attempt limit: wrong codes may be retried until expiry.
Concurrent writes to the same record are last-write-wins.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

from .credentials import SecretHasher, consume_otp, generate_otp, generate_temp_password
from .exceptions import (
    Conflict,
    DeliveryError,
    InvalidInput,
    InvalidState,
    NotFound,
    Unauthorized,
)
from .ports import (
    DocumentStorage,
    DocumentType,
    EmailSender,
    MemberRecord,
    MemberRepository,
    MemberStatus,
    PaymentEntry,
    Qualification,
    Speciality,
)

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class RegistrationSubmission:
    """Identity and compliance fields of a registration form."""

    name: str | None
    email: str | None
    phone: str | None
    document_type: str | None
    document_number: str | None
    speciality: str | None = None
    qualifications: list[str] = field(default_factory=list)
    terms_accepted: bool = False


@dataclass
class DocumentUpload:
    """The identity document binary attached to a registration."""

    content: bytes
    filename: str
    content_type: str | None = None


@dataclass
class ProfileUpdate:
    """Member-editable profile fields. None means unchanged."""

    name: str | None = None
    phone: str | None = None
    speciality: str | None = None
    qualifications: list[str] | None = None


@dataclass(frozen=True)
class LoginResult:
    member: MemberRecord
    requires_password_change: bool


@dataclass
class MembershipService:
    """
    Domain service for the member lifecycle.

    All collaborators are injected so tests can substitute fakes,
    including the clock used for OTP expiry.
    """

    repository: MemberRepository
    email_sender: EmailSender
    storage: DocumentStorage
    hasher: SecretHasher = field(default_factory=SecretHasher)
    otp_ttl: timedelta = timedelta(minutes=10)
    clock: Callable[[], datetime] = _utc_now

    # Registration and OTP

    def register(self, submission: RegistrationSubmission, document: DocumentUpload | None) -> str:
        """
        Submit a registration, or re-issue the OTP of an unverified one.

        Args:
            submission: Form fields (all identity/compliance fields required)
            document: Identity document binary (required)

        Returns:
            Normalized email address the OTP was sent to

        Raises:
            InvalidInput: Missing or malformed fields, or no document
            Conflict: Email already approved or awaiting admin review
            DeliveryError: OTP email could not be sent (record is kept)
        """
        self._validate_submission(submission)
        if document is None or not document.content:
            raise InvalidInput("Document image is required")

        email = normalize_email(submission.email)
        existing = self.repository.find_active_by_email(email)

        if existing is not None:
            if existing.status == MemberStatus.APPROVED:
                raise Conflict("Member with this email is already registered and approved")
            if existing.otp_verified:
                raise Conflict("Registration is already awaiting admin approval")
            # Unverified resubmission: only the OTP changes
            self._issue_otp(existing)
            logger.info("Re-issued OTP for unverified registration %s", existing.id)
            return email

        stored = self.storage.upload(document.content, document.filename, document.content_type)
        now = self.clock()
        member = MemberRecord(
            name=submission.name.strip(),
            email=email,
            phone=submission.phone.strip(),
            document_type=submission.document_type,
            document_number=submission.document_number.strip(),
            document_url=stored.url,
            document_ref=stored.ref,
            terms_accepted=submission.terms_accepted,
            terms_accepted_at=now if submission.terms_accepted else None,
            speciality=submission.speciality,
            qualifications=list(submission.qualifications),
        )
        otp = generate_otp()
        member.otp_hash = self.hasher.hash(otp)
        member.otp_expires_at = now + self.otp_ttl

        try:
            member = self.repository.create(member)
        except Exception:
            logger.exception(
                "Failed to store registration for %s; uploaded document %s is orphaned",
                email,
                stored.ref,
            )
            raise

        logger.info("Created pending registration %s", member.id)
        self._send_otp(email, otp)
        return email

    def resend_otp(self, email: str) -> None:
        """
        Issue a fresh OTP for a pending, not yet verified registration.

        Raises:
            NotFound: No unverified pending registration for the email
            DeliveryError: OTP email could not be sent (new OTP is kept)
        """
        member = self._find_pending(email)
        if member is None or member.otp_verified:
            raise NotFound("Member not found or already verified")
        self._issue_otp(member)

    def verify_otp(self, email: str, otp: str) -> MemberRecord:
        """
        Check a registration OTP and move the record to pending-review.

        Raises:
            NotFound: No pending registration for the email
            InvalidState: No OTP outstanding (never issued or already used)
            Expired: OTP past expiry; the OTP is cleared
            Unauthorized: OTP mismatch; nothing changes
        """
        member = self._find_pending(email)
        if member is None:
            raise NotFound("Member not found")

        consume_otp(member, otp, self.hasher, self.clock(), self.repository.save)

        member.otp_verified = True
        self.repository.save(member)
        logger.info("Registration %s verified, awaiting review", member.id)

        try:
            self.email_sender.send_review_pending(member.email, member.name)
        except Exception:
            logger.warning("Failed to send review-pending email to %s", member.email, exc_info=True)

        return member

    # Admin review

    def approve(
        self,
        member_id: UUID,
        unique_member_id: str | None,
        reviewer: str,
        notes: str | None = None,
    ) -> MemberRecord:
        """
        Approve a verified registration and issue credentials.

        The member id is supplied by the reviewing admin; the temporary
        password is generated here and leaves only through the approval email.

        Raises:
            InvalidInput: Blank member id
            NotFound: No such record
            InvalidState: Already approved, or email not OTP-verified yet
            Conflict: Member id already belongs to another record, or a
                rejected record's email was registered again since
        """
        unique_member_id = (unique_member_id or "").strip()
        if not unique_member_id:
            raise InvalidInput("Unique member ID is required")

        member = self._get(member_id)
        if member.status == MemberStatus.APPROVED:
            raise InvalidState("Member is already approved")
        if not member.otp_verified:
            raise InvalidState("Member has not verified their email")
        if member.status == MemberStatus.REJECTED:
            active = self.repository.find_active_by_email(member.email)
            if active is not None and active.id != member.id:
                raise Conflict("A newer registration exists for this email")

        holder = self.repository.find_by_unique_id(unique_member_id)
        if holder is not None and holder.id != member.id:
            raise Conflict("Unique member ID is already in use")

        temp_password = generate_temp_password()
        member.status = MemberStatus.APPROVED
        member.is_verified = True
        member.unique_member_id = unique_member_id
        member.temp_password_hash = self.hasher.hash(temp_password)
        member.password_hash = None
        member.reviewed_at = self.clock()
        member.reviewed_by = reviewer
        member.admin_notes = notes
        self.repository.save(member)
        logger.info("Member %s approved by %s as %s", member.id, reviewer, unique_member_id)

        try:
            self.email_sender.send_approval(member.email, member.name, unique_member_id, temp_password)
        except Exception:
            logger.warning("Failed to send approval email to %s", member.email, exc_info=True)

        return member

    def reject(self, member_id: UUID, notes: str | None, reviewer: str) -> MemberRecord:
        """
        Reject a registration. Notes are mandatory and sent to the registrant.

        Raises:
            InvalidInput: Blank notes
            NotFound: No such record
            InvalidState: Already rejected
        """
        notes = (notes or "").strip()
        if not notes:
            raise InvalidInput("Admin notes are required for rejection")

        member = self._get(member_id)
        if member.status == MemberStatus.REJECTED:
            raise InvalidState("Member is already rejected")

        member.status = MemberStatus.REJECTED
        member.reviewed_at = self.clock()
        member.reviewed_by = reviewer
        member.admin_notes = notes
        self.repository.save(member)
        logger.info("Member %s rejected by %s", member.id, reviewer)

        try:
            self.email_sender.send_rejection(member.email, member.name, notes)
        except Exception:
            logger.warning("Failed to send rejection email to %s", member.email, exc_info=True)

        return member

    # Member credentials

    def login(self, unique_member_id: str, password: str) -> LoginResult:
        """
        Authenticate an approved member.

        The temporary password is checked first; a match means the member
        must change it and the permanent hash is not consulted.

        Raises:
            NotFound: No approved member with that id
            Unauthorized: Neither password matches
        """
        member = self._get_approved(unique_member_id)

        if self.hasher.verify(password, member.temp_password_hash):
            return LoginResult(member=member, requires_password_change=True)
        if self.hasher.verify(password, member.password_hash):
            return LoginResult(member=member, requires_password_change=False)
        raise Unauthorized("Invalid credentials")

    def change_password(self, unique_member_id: str, current_password: str, new_password: str) -> None:
        """
        Replace the current (temporary or permanent) password with a permanent one.

        Raises:
            NotFound: No approved member with that id
            Unauthorized: Current password does not match
        """
        member = self._get_approved(unique_member_id)

        valid = self.hasher.verify(current_password, member.temp_password_hash)
        if not valid:
            valid = self.hasher.verify(current_password, member.password_hash)
        if not valid:
            raise Unauthorized("Current password is incorrect")

        member.password_hash = self.hasher.hash(new_password)
        member.temp_password_hash = None
        self.repository.save(member)
        logger.info("Member %s changed password", member.id)

        try:
            self.email_sender.send_password_changed(member.email, member.name)
        except Exception:
            logger.warning("Failed to send password-changed email to %s", member.email, exc_info=True)

    # Profile

    def get_profile(self, unique_member_id: str) -> MemberRecord:
        return self._get_approved(unique_member_id)

    def update_profile(self, unique_member_id: str, changes: ProfileUpdate) -> MemberRecord:
        """
        Apply member-editable profile changes.

        Email, member id, verification and payment fields are never
        changed through this path.
        """
        member = self._get_approved(unique_member_id)

        if changes.name is not None:
            if not changes.name.strip():
                raise InvalidInput("Name cannot be empty")
            member.name = changes.name.strip()
        if changes.phone is not None:
            member.phone = self._validate_phone(changes.phone)
        if changes.speciality is not None:
            member.speciality = self._validate_speciality(changes.speciality)
        if changes.qualifications is not None:
            member.qualifications = self._validate_qualifications(changes.qualifications)

        self.repository.save(member)
        return member

    # Admin member management

    def list_members(self, status: MemberStatus | None = None) -> list[MemberRecord]:
        return self.repository.list(status)

    def get_member(self, member_id: UUID) -> MemberRecord:
        return self._get(member_id)

    def set_payment_status(self, member_id: UUID, is_payment_done: bool | None = None) -> MemberRecord:
        """Set the payment flag, or toggle it when no value is given."""
        member = self._get(member_id)
        if is_payment_done is None:
            is_payment_done = not member.is_payment_done
        member.is_payment_done = is_payment_done
        self.repository.save(member)
        return member

    def record_payment(
        self,
        member_id: UUID,
        payment_id: str,
        amount: float,
        paid_at: datetime | None = None,
    ) -> MemberRecord:
        """Append a payment to the member's history and mark fees as paid."""
        if not payment_id or not payment_id.strip():
            raise InvalidInput("Payment ID is required")
        if amount < 0:
            raise InvalidInput("Payment amount cannot be negative")

        member = self._get(member_id)
        member.payment_history.append(
            PaymentEntry(payment_id=payment_id.strip(), paid_at=paid_at or self.clock(), amount=amount)
        )
        member.is_payment_done = True
        self.repository.save(member)
        return member

    def delete_member(self, member_id: UUID) -> None:
        """
        Delete a member and release their stored document.

        Document deletion is best effort: a storage failure is logged and
        the record is deleted regardless.
        """
        member = self._get(member_id)

        if member.document_ref:
            try:
                self.storage.delete(member.document_ref)
            except Exception:
                logger.warning(
                    "Failed to delete document %s for member %s",
                    member.document_ref,
                    member.id,
                    exc_info=True,
                )

        if not self.repository.delete(member_id):
            raise NotFound("Member not found")
        logger.info("Member %s deleted", member_id)

    # Internals

    def _issue_otp(self, member: MemberRecord) -> None:
        otp = generate_otp()
        member.otp_hash = self.hasher.hash(otp)
        member.otp_expires_at = self.clock() + self.otp_ttl
        self.repository.save(member)
        self._send_otp(member.email, otp)

    def _send_otp(self, email: str, otp: str) -> None:
        minutes = int(self.otp_ttl.total_seconds() // 60)
        try:
            self.email_sender.send_otp(email, otp, minutes)
        except Exception as e:
            logger.error("Failed to send OTP email to %s: %s", email, e)
            raise DeliveryError("Failed to send OTP email. Please try again.") from e

    def _find_pending(self, email: str) -> MemberRecord | None:
        member = self.repository.find_active_by_email(normalize_email(email))
        if member is None or member.status != MemberStatus.PENDING:
            return None
        return member

    def _get(self, member_id: UUID) -> MemberRecord:
        member = self.repository.get(member_id)
        if member is None:
            raise NotFound("Member not found")
        return member

    def _get_approved(self, unique_member_id: str) -> MemberRecord:
        member = self.repository.find_by_unique_id(unique_member_id.strip())
        if member is None or member.status != MemberStatus.APPROVED:
            raise NotFound("Member not found or not approved")
        return member

    def _validate_submission(self, submission: RegistrationSubmission) -> None:
        required = {
            "name": submission.name,
            "email": submission.email,
            "phone": submission.phone,
            "documentType": submission.document_type,
            "documentNo": submission.document_number,
        }
        missing = [key for key, value in required.items() if not value or not value.strip()]
        if missing:
            raise InvalidInput(f"All fields are required (missing: {', '.join(missing)})")

        if "@" not in submission.email:
            raise InvalidInput("Invalid email address")
        submission.phone = self._validate_phone(submission.phone)

        try:
            submission.document_type = DocumentType(submission.document_type.strip().lower()).value
        except ValueError:
            raise InvalidInput(f"Unknown document type: {submission.document_type}") from None

        if submission.speciality is not None:
            submission.speciality = self._validate_speciality(submission.speciality)
        submission.qualifications = self._validate_qualifications(submission.qualifications)

    def _validate_phone(self, phone: str) -> str:
        phone = phone.strip()
        if not PHONE_PATTERN.match(phone):
            raise InvalidInput("Phone must be a 10-digit mobile number")
        return phone

    def _validate_speciality(self, speciality: str) -> str:
        try:
            return Speciality(speciality.strip().lower()).value
        except ValueError:
            raise InvalidInput(f"Unknown speciality: {speciality}") from None

    def _validate_qualifications(self, qualifications: list[str]) -> list[str]:
        values = []
        for item in qualifications:
            try:
                value = Qualification(item.strip().lower()).value
            except ValueError:
                raise InvalidInput(f"Unknown qualification: {item}") from None
            if value not in values:
                values.append(value)
        return values
