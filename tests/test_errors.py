"""Tests for localcert.errors."""

from __future__ import annotations

from localcert.errors import (
    BAD_NONCE,
    MALFORMED,
    AcmeProblemError,
    FeatureMissingError,
    HttpError,
    InvalidBaseUrlError,
    LocalcertError,
    PhaseConsumedError,
    SerializationError,
    StateError,
    StatusWaitTimeout,
    TransportError,
    UnexpectedStatusError,
)


class TestHierarchy:
    def test_everything_is_localcert_error(self):
        for exc in (
            HttpError(500),
            AcmeProblemError(MALFORMED),
            FeatureMissingError("dns-01"),
            UnexpectedStatusError("order", "invalid"),
            PhaseConsumedError("used"),
            StatusWaitTimeout("pending", 10),
            InvalidBaseUrlError("x"),
            SerializationError("x"),
        ):
            assert isinstance(exc, LocalcertError)

    def test_state_errors(self):
        assert issubclass(UnexpectedStatusError, StateError)
        assert issubclass(PhaseConsumedError, StateError)
        assert issubclass(HttpError, TransportError)


class TestMessages:
    def test_http_error(self):
        exc = HttpError(503, "unavailable")
        assert str(exc) == "http: [503] unavailable"
        assert exc.status == 503
        assert exc.body == "unavailable"

    def test_unexpected_status(self):
        exc = UnexpectedStatusError("order", "invalid")
        assert str(exc) == "unexpected order status 'invalid'"

    def test_timeout(self):
        assert str(StatusWaitTimeout("processing", 2.5)) == "order still 'processing' after 2.5s"

    def test_prefixes(self):
        assert str(InvalidBaseUrlError("no host")) == "invalid base URL: no host"
        assert str(SerializationError("bad")) == "json: bad"


class TestAcmeProblemError:
    def test_from_dict(self):
        exc = AcmeProblemError.from_dict(
            {
                "type": BAD_NONCE,
                "detail": "stale",
                "status": 400,
                "subproblems": [{"type": MALFORMED}],
            },
        )

        assert exc.is_bad_nonce
        assert exc.detail == "stale"
        assert exc.status == 400
        assert exc.subproblems == [{"type": MALFORMED}]
        assert str(exc) == f"{BAD_NONCE}: stale"

    def test_from_dict_defaults(self):
        exc = AcmeProblemError.from_dict({})
        assert exc.error_type == "about:blank"
        assert exc.status is None
