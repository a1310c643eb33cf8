"""
In-memory fakes for the domain ports.

Used by unit tests in place of PostgreSQL, Resend and S3. Records are
copied on the way in and out so tests observe only what was saved.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from src.domain.exceptions import Conflict
from src.domain.membership import DocumentUpload, RegistrationSubmission
from src.domain.ports import AdminRecord, MemberRecord, MemberStatus, StoredDocument


class FakeClock:
    """Controllable clock; call it to read the time, advance() to move it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemoryMemberRepository:
    """Implements MemberRepository with the same uniqueness rules as PostgreSQL."""

    def __init__(self) -> None:
        self.records: dict[UUID, MemberRecord] = {}
        self.save_calls = 0
        self.fail_on_create: Exception | None = None

    def create(self, member: MemberRecord) -> MemberRecord:
        if self.fail_on_create is not None:
            raise self.fail_on_create
        if self.find_active_by_email(member.email) is not None:
            raise Conflict("Member with this email already exists")
        stored = copy.deepcopy(member)
        stored.id = uuid4()
        stored.created_at = datetime.now(timezone.utc) + timedelta(microseconds=len(self.records))
        stored.updated_at = stored.created_at
        self.records[stored.id] = stored
        return copy.deepcopy(stored)

    def save(self, member: MemberRecord) -> None:
        if member.status != MemberStatus.REJECTED:
            for other in self.records.values():
                if (
                    other.id != member.id
                    and other.email == member.email
                    and other.status != MemberStatus.REJECTED
                ):
                    raise Conflict("A newer registration exists for this email")
        if member.unique_member_id is not None:
            for other in self.records.values():
                if other.id != member.id and other.unique_member_id == member.unique_member_id:
                    raise Conflict("Unique member ID is already in use")
        self.save_calls += 1
        self.records[member.id] = copy.deepcopy(member)

    def get(self, member_id: UUID) -> MemberRecord | None:
        record = self.records.get(member_id)
        return copy.deepcopy(record) if record is not None else None

    def find_active_by_email(self, email: str) -> MemberRecord | None:
        matches = [
            r for r in self.records.values()
            if r.email == email and r.status != MemberStatus.REJECTED
        ]
        if not matches:
            return None
        return copy.deepcopy(max(matches, key=lambda r: r.created_at))

    def find_by_unique_id(self, unique_member_id: str) -> MemberRecord | None:
        for record in self.records.values():
            if record.unique_member_id == unique_member_id:
                return copy.deepcopy(record)
        return None

    def list(self, status: MemberStatus | None = None) -> list[MemberRecord]:
        records = [r for r in self.records.values() if status is None or r.status == status]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return [copy.deepcopy(r) for r in records]

    def delete(self, member_id: UUID) -> bool:
        return self.records.pop(member_id, None) is not None

    def by_email(self, email: str) -> list[MemberRecord]:
        return [r for r in self.records.values() if r.email == email]


class InMemoryAdminRepository:
    def __init__(self) -> None:
        self.records: dict[UUID, AdminRecord] = {}

    def create(self, admin: AdminRecord) -> AdminRecord:
        if self.find_by_admin_id(admin.admin_id) is not None:
            raise Conflict(f"Admin {admin.admin_id} already exists")
        stored = copy.deepcopy(admin)
        stored.id = uuid4()
        stored.created_at = datetime.now(timezone.utc)
        stored.updated_at = stored.created_at
        self.records[stored.id] = stored
        return copy.deepcopy(stored)

    def save(self, admin: AdminRecord) -> None:
        self.records[admin.id] = copy.deepcopy(admin)

    def get(self, admin_pk: UUID) -> AdminRecord | None:
        record = self.records.get(admin_pk)
        return copy.deepcopy(record) if record is not None else None

    def find_by_admin_id(self, admin_id: str) -> AdminRecord | None:
        for record in self.records.values():
            if record.admin_id == admin_id:
                return copy.deepcopy(record)
        return None

    def find_by_email(self, email: str) -> AdminRecord | None:
        for record in self.records.values():
            if record.email == email:
                return copy.deepcopy(record)
        return None


@dataclass
class SentEmail:
    kind: str
    to: str
    data: dict = field(default_factory=dict)


class RecordingEmailSender:
    """
    Implements EmailSender by recording every message.

    Put a message kind in fail_kinds to make that kind raise.
    """

    def __init__(self) -> None:
        self.sent: list[SentEmail] = []
        self.fail_kinds: set[str] = set()

    def _record(self, kind: str, to: str, **data: object) -> None:
        if kind in self.fail_kinds:
            raise ConnectionError(f"SMTP down while sending {kind}")
        self.sent.append(SentEmail(kind=kind, to=to, data=data))

    def send_otp(self, email: str, code: str, expires_in_minutes: int) -> None:
        self._record("otp", email, code=code, expires_in_minutes=expires_in_minutes)

    def send_review_pending(self, email: str, name: str) -> None:
        self._record("review_pending", email, name=name)

    def send_approval(
        self, email: str, name: str, unique_member_id: str, temporary_password: str
    ) -> None:
        self._record(
            "approval",
            email,
            name=name,
            unique_member_id=unique_member_id,
            temporary_password=temporary_password,
        )

    def send_rejection(self, email: str, name: str, notes: str) -> None:
        self._record("rejection", email, name=name, notes=notes)

    def send_password_changed(self, email: str, name: str) -> None:
        self._record("password_changed", email, name=name)

    def of_kind(self, kind: str) -> list[SentEmail]:
        return [m for m in self.sent if m.kind == kind]

    def last_otp(self, email: str | None = None) -> str:
        otps = [m for m in self.of_kind("otp") if email is None or m.to == email]
        return otps[-1].data["code"]


class InMemoryDocumentStorage:
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.uploads = 0
        self.fail_on_delete = False

    def upload(
        self, content: bytes, filename: str, content_type: str | None = None
    ) -> StoredDocument:
        self.uploads += 1
        ref = f"docs/{uuid4().hex}_{filename}"
        self.objects[ref] = content
        return StoredDocument(url=f"https://files.example.org/{ref}", ref=ref)

    def delete(self, ref: str) -> None:
        if self.fail_on_delete:
            raise ConnectionError("storage unavailable")
        del self.objects[ref]


def make_submission(**overrides: object) -> RegistrationSubmission:
    fields = {
        "name": "Dr. Asha Mohanty",
        "email": "a@x.com",
        "phone": "9876543210",
        "document_type": "aadhaar",
        "document_number": "1234-5678-9012",
        "speciality": "medical_oncology",
        "qualifications": ["md", "dm"],
        "terms_accepted": True,
    }
    fields.update(overrides)
    return RegistrationSubmission(**fields)


def make_document(content: bytes = b"%PDF-1.4 scan") -> DocumentUpload:
    return DocumentUpload(content=content, filename="aadhaar.pdf", content_type="application/pdf")
