"""Session token adapters."""

from .jwt_tokens import JwtTokenIssuer

__all__ = ["JwtTokenIssuer"]
