"""
Credential utilities - OTP and temporary password generation, secret hashing.

All randomness comes from the secrets module. OTPs and passwords are only
ever stored as bcrypt hashes; plaintext leaves the process through the
email port and nowhere else.
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

import bcrypt

from .exceptions import Expired, InvalidInput, InvalidState, Unauthorized

OTP_MIN = 100000
OTP_MAX = 999999

TEMP_PASSWORD_LENGTH = 10
TEMP_PASSWORD_ALPHABET = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"
)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def generate_otp() -> str:
    """
    Generate a 6-digit one-time password.

    Uniform over 100000-999999, so the code never has a leading zero.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_temp_password() -> str:
    """Generate a 10-character temporary password for a newly approved member."""
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(TEMP_PASSWORD_LENGTH))


@dataclass(frozen=True)
class SecretHasher:
    """
    One-way hash + compare for OTPs and passwords (bcrypt).

    Args:
        rounds: bcrypt work factor (4-31)
    """

    rounds: int = 10

    def hash(self, secret: str) -> str:
        encoded = secret.encode()
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise InvalidInput(f"Secret must be at most {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, secret: str, hashed: str | None) -> bool:
        """
        Constant-time compare of a plaintext against a stored hash.

        A missing hash or an over-long secret never matches.
        """
        if not hashed:
            return False
        encoded = secret.encode()
        if len(encoded) > BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(encoded, hashed.encode())


class HasOtp(Protocol):
    otp_hash: str | None
    otp_expires_at: datetime | None


def consume_otp(
    record: HasOtp,
    otp: str,
    hasher: SecretHasher,
    now: datetime,
    save: Callable[[Any], None],
) -> None:
    """
    Check an OTP against a record and clear it on success.

    Shared by member and admin verification. On success the OTP pair is
    cleared in memory; the caller persists it along with its own changes.

    Raises:
        InvalidState: No OTP outstanding
        Expired: Past expiry; the pair is cleared and saved immediately
        Unauthorized: Mismatch; the record is left untouched
    """
    if not record.otp_hash or not record.otp_expires_at:
        raise InvalidState("No OTP outstanding. Please request a new one.")

    if now > record.otp_expires_at:
        record.otp_hash = None
        record.otp_expires_at = None
        save(record)
        raise Expired("OTP expired. Please request a new OTP.")

    if not hasher.verify(otp, record.otp_hash):
        raise Unauthorized("Invalid OTP")

    record.otp_hash = None
    record.otp_expires_at = None
