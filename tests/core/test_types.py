"""Tests for localcert.core.types."""

from __future__ import annotations

import pytest

from localcert.core.types import (
    AuthorizationStatus,
    ChallengeStatus,
    ChallengeType,
    OrderStatus,
    Phase,
)


class TestOrderStatus:
    def test_values(self):
        assert [s.value for s in OrderStatus] == [
            "pending",
            "ready",
            "processing",
            "valid",
            "invalid",
        ]

    def test_compares_with_wire_string(self):
        assert OrderStatus.READY == "ready"

    def test_parse_known(self):
        assert OrderStatus.parse("processing") is OrderStatus.PROCESSING

    def test_parse_unknown_keeps_raw_string(self):
        status = OrderStatus.parse("archived")
        assert status == "archived"
        assert not isinstance(status, OrderStatus)


class TestAuthorizationStatus:
    @pytest.mark.parametrize(
        "value",
        ["pending", "valid", "invalid", "deactivated", "expired", "revoked"],
    )
    def test_parse_known(self, value):
        assert isinstance(AuthorizationStatus.parse(value), AuthorizationStatus)

    def test_parse_unknown(self):
        assert AuthorizationStatus.parse("frozen") == "frozen"


def test_challenge_status_parse():
    assert ChallengeStatus.parse("pending") is ChallengeStatus.PENDING
    assert ChallengeStatus.parse("deactivated") == "deactivated"


def test_challenge_type_tags():
    assert ChallengeType.DNS_01 == "dns-01"
    assert [t.value for t in ChallengeType] == ["dns-01"]


def test_phases():
    assert [p.value for p in Phase] == [
        "registered",
        "ordered",
        "authorized",
        "finalized",
        "complete",
    ]
