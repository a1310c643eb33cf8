"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.notifications import ConsoleEmailSender, ResendEmailSender
from src.adapters.repository.postgres import PostgresAdminRepository, PostgresMemberRepository
from src.adapters.storage import LocalDocumentStorage, S3DocumentStorage
from src.adapters.tokens import JwtTokenIssuer
from src.config.settings import get_settings
from src.domain.admin_auth import AdminAuthService
from src.domain.credentials import SecretHasher
from src.domain.membership import MembershipService
from src.domain.ports import AdminRecord, DocumentStorage, EmailSender, TokenIssuer


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


@lru_cache
def get_email_sender() -> EmailSender:
    """Resend when an API key is configured, console logging otherwise."""
    settings = get_settings()
    if settings.resend_api_key:
        return ResendEmailSender(settings.resend_api_key, settings.email_from)
    return ConsoleEmailSender()


@lru_cache
def get_document_storage() -> DocumentStorage:
    """S3 when a bucket is configured, a local directory otherwise."""
    settings = get_settings()
    if settings.s3_bucket:
        return S3DocumentStorage(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            prefix=settings.s3_prefix,
            base_url=settings.s3_base_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
    return LocalDocumentStorage(settings.local_upload_dir)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    settings = get_settings()
    return JwtTokenIssuer(
        secret=settings.jwt_secret,
        expires_in_seconds=settings.jwt_expires_in_seconds,
        algorithm=settings.jwt_algorithm,
    )


def get_membership_service(request: Request) -> MembershipService:
    """
    Create membership service with injected dependencies.

    Wires together the member repository, email sender and document
    storage for the domain service.
    """
    settings = get_settings()
    return MembershipService(
        repository=PostgresMemberRepository(get_pool(request)),
        email_sender=get_email_sender(),
        storage=get_document_storage(),
        hasher=SecretHasher(rounds=settings.bcrypt_cost),
        otp_ttl=timedelta(seconds=settings.member_otp_ttl_seconds),
    )


def get_admin_auth_service(request: Request) -> AdminAuthService:
    settings = get_settings()
    return AdminAuthService(
        repository=PostgresAdminRepository(get_pool(request)),
        email_sender=get_email_sender(),
        token_issuer=get_token_issuer(),
        hasher=SecretHasher(rounds=settings.bcrypt_cost),
        password_hasher=SecretHasher(rounds=settings.admin_bcrypt_cost),
        otp_ttl=timedelta(seconds=settings.admin_otp_ttl_seconds),
    )


# Bearer token security scheme for OpenAPI documentation
bearer_scheme = HTTPBearer(description="Admin session token from /admin/verify-otp")


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> AdminRecord:
    """
    Resolve the bearer token to an admin record.

    HTTPBearer rejects a missing or malformed Authorization header;
    an invalid or expired token raises Unauthorized (401).
    """
    return service.authenticate(credentials.credentials)
