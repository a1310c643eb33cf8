"""
Domain exceptions - Semantic error types for membership workflows.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each type to an HTTP status code.
"""


class MembershipError(Exception):
    """Base class for membership domain errors."""

    pass


class InvalidInput(MembershipError):
    """Missing or malformed input - the caller must fix the request."""

    pass


class NotFound(MembershipError):
    """No record matches the lookup."""

    pass


class Conflict(MembershipError):
    """The current state of the data precludes the operation."""

    pass


class InvalidState(MembershipError):
    """The record is in the wrong lifecycle state for this transition."""

    pass


class Unauthorized(MembershipError):
    """OTP, password or session token mismatch."""

    pass


class Expired(MembershipError):
    """OTP is past its expiry; a fresh one must be requested."""

    pass


class DeliveryError(MembershipError):
    """
    Notification delivery failed.

    Data changes made before the dispatch are NOT rolled back.
    """

    pass
