"""Enumerated types for ACME resources and issuance phases.

All status enums are ``StrEnum`` subclasses so a member compares equal
to the plain string the ACME server sends.  Servers are free to report
statuses this library does not know about, so statuses are parsed with
:meth:`_WireStatus.parse`, which returns the raw string instead of
raising.
"""

from __future__ import annotations

from enum import StrEnum


class _WireStatus(StrEnum):
    """Base for statuses read off the wire."""

    @classmethod
    def parse(cls, value: str) -> _WireStatus | str:
        """Return the member for *value*, or *value* itself if unknown."""
        try:
            return cls(value)
        except ValueError:
            return value


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------


class OrderStatus(_WireStatus):
    PENDING = "pending"
    READY = "ready"
    PROCESSING = "processing"
    VALID = "valid"
    INVALID = "invalid"


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class AuthorizationStatus(_WireStatus):
    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"
    DEACTIVATED = "deactivated"
    EXPIRED = "expired"
    REVOKED = "revoked"


# ---------------------------------------------------------------------------
# Challenge
# ---------------------------------------------------------------------------


class ChallengeStatus(_WireStatus):
    PENDING = "pending"
    PROCESSING = "processing"
    VALID = "valid"
    INVALID = "invalid"


# ---------------------------------------------------------------------------
# Challenge types
# ---------------------------------------------------------------------------


class ChallengeType(StrEnum):
    DNS_01 = "dns-01"


# ---------------------------------------------------------------------------
# Issuance phases
# ---------------------------------------------------------------------------


class Phase(StrEnum):
    REGISTERED = "registered"
    ORDERED = "ordered"
    AUTHORIZED = "authorized"
    FINALIZED = "finalized"
    COMPLETE = "complete"
