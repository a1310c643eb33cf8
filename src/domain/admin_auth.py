"""
Admin authentication domain service - password + OTP second factor.

Flow:
    login(admin_id, password)  -> OTP emailed, hash stored with 5 minute expiry
    verify_otp(admin_id, otp)  -> OTP cleared, signed session token issued
    authenticate(token)        -> AdminRecord for admin-only routes

Unlike member registration, the admin OTP is persisted before it is sent:
if delivery fails the call fails but the stored OTP is left in place.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

from .credentials import SecretHasher, consume_otp, generate_otp
from .exceptions import Conflict, DeliveryError, InvalidInput, NotFound, Unauthorized
from .membership import normalize_email
from .ports import AdminRecord, AdminRepository, EmailSender, TokenIssuer

logger = logging.getLogger(__name__)

MIN_ADMIN_PASSWORD_LENGTH = 6


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AdminSession:
    admin: AdminRecord
    token: str
    expires_in: int


@dataclass
class AdminAuthService:
    """
    Domain service for admin login, session issuance and admin profile.

    Admin passwords use their own (higher) bcrypt cost; OTPs use the
    regular OTP hasher.
    """

    repository: AdminRepository
    email_sender: EmailSender
    token_issuer: TokenIssuer
    hasher: SecretHasher = field(default_factory=SecretHasher)
    password_hasher: SecretHasher = field(default_factory=lambda: SecretHasher(rounds=14))
    otp_ttl: timedelta = timedelta(minutes=5)
    clock: Callable[[], datetime] = _utc_now

    @property
    def otp_ttl_minutes(self) -> int:
        return int(self.otp_ttl.total_seconds() // 60)

    def login(self, admin_id: str, password: str) -> str:
        """
        First factor: check the password and email a fresh OTP.

        Returns:
            The admin id the OTP was issued for

        Raises:
            NotFound: Unknown admin id
            Unauthorized: Wrong password
            DeliveryError: OTP email failed (the OTP stays stored)
        """
        admin = self._find(admin_id)
        if not self.password_hasher.verify(password, admin.password_hash):
            raise Unauthorized("Invalid password")

        otp = generate_otp()
        admin.otp_hash = self.hasher.hash(otp)
        admin.otp_expires_at = self.clock() + self.otp_ttl
        self.repository.save(admin)

        try:
            self.email_sender.send_otp(admin.email, otp, self.otp_ttl_minutes)
        except Exception as e:
            logger.error("Failed to send admin OTP email for %s: %s", admin.admin_id, e)
            raise DeliveryError("Failed to send OTP email. Try again later.") from e

        logger.info("Admin OTP issued for %s", admin.admin_id)
        return admin.admin_id

    def verify_otp(self, admin_id: str, otp: str) -> AdminSession:
        """
        Second factor: check the OTP and issue a session token.

        Raises:
            NotFound: Unknown admin id
            InvalidState: No OTP outstanding
            Expired: OTP past expiry (cleared)
            Unauthorized: OTP mismatch
        """
        admin = self._find(admin_id)
        consume_otp(admin, otp, self.hasher, self.clock(), self.repository.save)

        token = self.token_issuer.issue(admin)
        self.repository.save(admin)
        logger.info("Admin %s logged in", admin.admin_id)
        return AdminSession(admin=admin, token=token, expires_in=self.token_issuer.expires_in_seconds)

    def authenticate(self, token: str) -> AdminRecord:
        """Resolve a session token to its admin, or raise Unauthorized."""
        claims = self.token_issuer.decode(token)
        try:
            admin_pk = UUID(str(claims.get("sub")))
        except ValueError:
            raise Unauthorized("Invalid token") from None

        admin = self.repository.get(admin_pk)
        if admin is None:
            raise Unauthorized("Invalid token")
        return admin

    def get_profile(self, admin_pk: UUID) -> AdminRecord:
        admin = self.repository.get(admin_pk)
        if admin is None:
            raise NotFound("Admin not found")
        return admin

    def update_profile(self, admin_pk: UUID, name: str | None = None, email: str | None = None) -> AdminRecord:
        admin = self.get_profile(admin_pk)

        if email:
            email = normalize_email(email)
            if email != admin.email:
                other = self.repository.find_by_email(email)
                if other is not None and other.id != admin.id:
                    raise Conflict("Email already in use")
                admin.email = email
        if name:
            admin.name = name.strip()

        self.repository.save(admin)
        return admin

    def change_password(
        self, admin_pk: UUID, current_password: str, new_password: str, confirm_password: str
    ) -> None:
        if not current_password or not new_password or not confirm_password:
            raise InvalidInput("All password fields are required")
        if new_password != confirm_password:
            raise InvalidInput("New password and confirm password don't match")
        if len(new_password) < MIN_ADMIN_PASSWORD_LENGTH:
            raise InvalidInput(
                f"Password must be at least {MIN_ADMIN_PASSWORD_LENGTH} characters long"
            )

        admin = self.get_profile(admin_pk)
        if not self.password_hasher.verify(current_password, admin.password_hash):
            raise Unauthorized("Current password is incorrect")

        admin.password_hash = self.password_hasher.hash(new_password)
        self.repository.save(admin)
        logger.info("Admin %s changed password", admin.admin_id)

    def provision(self, name: str, email: str, admin_id: str, password: str) -> AdminRecord:
        """Create an admin account (used by the seed script)."""
        if not name or not email or not admin_id or not password:
            raise InvalidInput("Some fields are missing")
        if self.repository.find_by_admin_id(admin_id) is not None:
            raise Conflict(f"Admin {admin_id} already exists")

        admin = AdminRecord(
            name=name.strip(),
            email=normalize_email(email),
            admin_id=admin_id.strip(),
            password_hash=self.password_hasher.hash(password),
        )
        return self.repository.create(admin)

    def _find(self, admin_id: str) -> AdminRecord:
        admin = self.repository.find_by_admin_id(admin_id.strip())
        if admin is None:
            raise NotFound("Admin not found")
        return admin
