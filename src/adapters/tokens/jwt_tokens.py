"""
JWT token adapter - Implements TokenIssuer protocol with PyJWT.

Admin session tokens carry:
- sub: admin record id (UUID string)
- adminId, email: admin login handle and address
- iat, exp: issue time and fixed-lifetime expiry
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from src.domain.exceptions import Unauthorized
from src.domain.ports import AdminRecord


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JwtTokenIssuer:
    """Implements TokenIssuer protocol via PyJWT (HMAC-signed)."""

    def __init__(
        self,
        secret: str,
        expires_in_seconds: int,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self.expires_in_seconds = expires_in_seconds

    def issue(self, admin: AdminRecord) -> str:
        now = self._clock()
        claims = {
            "sub": str(admin.id),
            "adminId": admin.admin_id,
            "email": admin.email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired") from None
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid token") from None
