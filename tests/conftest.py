"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory fakes of the domain ports
- Membership and admin services wired to those fakes
- A controllable clock for OTP expiry
"""

from datetime import timedelta

import pytest

from src.adapters.tokens import JwtTokenIssuer
from src.domain.admin_auth import AdminAuthService
from src.domain.credentials import SecretHasher
from src.domain.membership import MembershipService
from tests.fakes import (
    FakeClock,
    InMemoryAdminRepository,
    InMemoryDocumentStorage,
    InMemoryMemberRepository,
    RecordingEmailSender,
)

# bcrypt minimum cost keeps the suite fast
FAST_HASHER = SecretHasher(rounds=4)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def member_repo() -> InMemoryMemberRepository:
    return InMemoryMemberRepository()


@pytest.fixture
def admin_repo() -> InMemoryAdminRepository:
    return InMemoryAdminRepository()


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def storage() -> InMemoryDocumentStorage:
    return InMemoryDocumentStorage()


@pytest.fixture
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer(secret="test-secret", expires_in_seconds=3600)


@pytest.fixture
def service(
    member_repo: InMemoryMemberRepository,
    sender: RecordingEmailSender,
    storage: InMemoryDocumentStorage,
    clock: FakeClock,
) -> MembershipService:
    return MembershipService(
        repository=member_repo,
        email_sender=sender,
        storage=storage,
        hasher=FAST_HASHER,
        otp_ttl=timedelta(minutes=10),
        clock=clock,
    )


@pytest.fixture
def admin_service(
    admin_repo: InMemoryAdminRepository,
    sender: RecordingEmailSender,
    token_issuer: JwtTokenIssuer,
    clock: FakeClock,
) -> AdminAuthService:
    return AdminAuthService(
        repository=admin_repo,
        email_sender=sender,
        token_issuer=token_issuer,
        hasher=FAST_HASHER,
        password_hasher=FAST_HASHER,
        otp_ttl=timedelta(minutes=5),
        clock=clock,
    )

