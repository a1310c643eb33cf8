"""
Unit tests for domain ports and exceptions.

Tests verify:
- Status and vocabulary enums serialize as plain strings
- Record defaults describe a fresh pending-unverified registration
- Exceptions share one base class
- Domain purity (zero framework imports)
"""

import json
import subprocess
import typing
from dataclasses import FrozenInstanceError
from enum import Enum

import pytest

from src.domain.exceptions import (
    Conflict,
    DeliveryError,
    Expired,
    InvalidInput,
    InvalidState,
    MembershipError,
    NotFound,
    Unauthorized,
)
from src.domain.ports import (
    DocumentType,
    MemberRecord,
    MemberRepository,
    MemberStatus,
    Qualification,
    Speciality,
    StoredDocument,
)
from tests.fakes import InMemoryMemberRepository


class TestMemberStatusEnum:
    """Tests for MemberStatus enum."""

    def test_member_status_is_str_enum(self) -> None:
        assert issubclass(MemberStatus, Enum)
        assert issubclass(MemberStatus, str)

    def test_values(self) -> None:
        assert [s.value for s in MemberStatus] == ["pending", "approved", "rejected"]

    def test_json_serializable(self) -> None:
        """str mixin allows direct JSON serialization."""
        assert json.dumps(MemberStatus.APPROVED) == '"approved"'

    def test_string_comparison(self) -> None:
        assert MemberStatus.PENDING == "pending"
        assert MemberStatus("rejected") is MemberStatus.REJECTED


class TestVocabularies:
    def test_document_types(self) -> None:
        assert DocumentType("aadhaar") is DocumentType.AADHAAR
        assert DocumentType.MEDICAL_REGISTRATION.value == "medical_registration"

    def test_document_type_vocabulary_is_closed(self) -> None:
        assert {d.value for d in DocumentType} == {
            "aadhaar",
            "pan",
            "passport",
            "voter_id",
            "driving_licence",
            "medical_registration",
        }

    def test_speciality_includes_others(self) -> None:
        assert Speciality("others") is Speciality.OTHERS

    def test_qualifications(self) -> None:
        assert {"dm", "mch", "md", "ms"} <= {q.value for q in Qualification}


class TestMemberRecordDefaults:
    def test_new_record_is_pending_unverified(self) -> None:
        member = MemberRecord(
            name="Dr. A",
            email="a@x.com",
            phone="9876543210",
            document_type="aadhaar",
            document_number="1",
            document_url="https://files.example.org/doc",
        )

        assert member.status == MemberStatus.PENDING
        assert member.otp_verified is False
        assert member.is_verified is False
        assert member.unique_member_id is None
        assert member.temp_password_hash is None
        assert member.password_hash is None
        assert member.payment_history == []

    def test_payment_history_not_shared(self) -> None:
        fields = dict(
            name="Dr. A",
            email="a@x.com",
            phone="9876543210",
            document_type="aadhaar",
            document_number="1",
            document_url="u",
        )
        first, second = MemberRecord(**fields), MemberRecord(**fields)
        first.payment_history.append(object())

        assert second.payment_history == []

    def test_stored_document_is_immutable(self) -> None:
        stored = StoredDocument(url="https://files.example.org/x", ref="x")
        with pytest.raises(FrozenInstanceError):
            stored.ref = "y"  # type: ignore[misc]


class TestMemberRepositoryProtocol:
    def test_declares_lookup_methods(self) -> None:
        for method in ("create", "save", "get", "find_active_by_email", "find_by_unique_id", "list", "delete"):
            assert hasattr(MemberRepository, method)

    def test_in_memory_repository_annotations_resolve(self) -> None:
        """A method named list must not shadow the builtin in later annotations."""
        hints = typing.get_type_hints(InMemoryMemberRepository.by_email)

        assert hints["return"] == list[MemberRecord]

    def test_in_memory_repository_lists_by_email(self) -> None:
        repo = InMemoryMemberRepository()
        repo.create(
            MemberRecord(
                name="A",
                email="a@x.com",
                phone="9876543210",
                document_type="aadhaar",
                document_number="1234",
                document_url="https://files.example.org/a.pdf",
            )
        )

        assert [r.email for r in repo.by_email("a@x.com")] == ["a@x.com"]
        assert repo.by_email("b@x.com") == []


class TestDomainExceptions:
    """Tests for domain exceptions."""

    @pytest.mark.parametrize(
        "exc_type",
        [InvalidInput, NotFound, Conflict, InvalidState, Unauthorized, Expired, DeliveryError],
    )
    def test_inherits_membership_error(self, exc_type: type[MembershipError]) -> None:
        assert issubclass(exc_type, MembershipError)
        assert issubclass(MembershipError, Exception)

    def test_message_is_preserved(self) -> None:
        with pytest.raises(Conflict, match="already approved"):
            raise Conflict("Member is already approved")


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from pydantic",
            "import pydantic",
            "from psycopg",
            "import psycopg",
            "import boto3",
            "import resend",
            "import jwt",
        ],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, "src/domain/"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"{pattern} found: {result.stdout}"
