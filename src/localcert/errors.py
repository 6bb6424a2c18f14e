"""Error taxonomy for issuance and the provisioning API.

Every failure reaches the caller as a subclass of :class:`LocalcertError`.
Structured problems reported by the ACME server or the provisioning
service are surfaced as :class:`AcmeProblemError`, which keeps the
RFC 7807 fields intact so callers can branch on :attr:`error_type`.

Usage::

    try:
        ordered = registered.new_order()
    except AcmeProblemError as exc:
        if exc.error_type == RATE_LIMITED:
            ...
"""

from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# RFC 8555 §6.7: ACME error-type URNs
# ---------------------------------------------------------------------------
_P = "urn:ietf:params:acme:error:"

ACCOUNT_DOES_NOT_EXIST = _P + "accountDoesNotExist"
BAD_CSR = _P + "badCSR"
BAD_NONCE = _P + "badNonce"
BAD_PUBLIC_KEY = _P + "badPublicKey"
BAD_SIGNATURE_ALGORITHM = _P + "badSignatureAlgorithm"
CAA = _P + "caa"
CONNECTION = _P + "connection"
DNS = _P + "dns"
INCORRECT_RESPONSE = _P + "incorrectResponse"
MALFORMED = _P + "malformed"
ORDER_NOT_READY = _P + "orderNotReady"
RATE_LIMITED = _P + "rateLimited"
REJECTED_IDENTIFIER = _P + "rejectedIdentifier"
SERVER_INTERNAL = _P + "serverInternal"
UNAUTHORIZED = _P + "unauthorized"
UNSUPPORTED_IDENTIFIER = _P + "unsupportedIdentifier"
USER_ACTION_REQUIRED = _P + "userActionRequired"


class LocalcertError(Exception):
    """Base class for every error raised by this package.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(LocalcertError):
    """The HTTP exchange could not be completed."""


class HttpError(TransportError):
    """Non-success HTTP status without a parseable problem document.

    Parameters
    ----------
    status:
        HTTP status code.
    body:
        Response body text (possibly empty).

    """

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"http: [{status}] {body}")


# ---------------------------------------------------------------------------
# Protocol problems
# ---------------------------------------------------------------------------


class AcmeProblemError(LocalcertError):
    """An RFC 7807 *problem details* document, raised as an exception.

    Parameters
    ----------
    error_type:
        A URN string (one of the constants above) or ``"about:blank"``.
    detail:
        Human-readable explanation of the problem.
    status:
        HTTP status code, when known.
    subproblems:
        Optional list of sub-problem dicts (RFC 8555 §6.7.1).

    """

    def __init__(
        self,
        error_type: str,
        detail: str = "",
        status: int | None = None,
        *,
        title: str | None = None,
        subproblems: list[dict[str, Any]] | None = None,
    ) -> None:
        self.error_type = error_type
        self.status = status
        self.title = title
        self.subproblems = subproblems
        super().__init__(detail)

    def __str__(self) -> str:
        return f"{self.error_type}: {self.detail}"

    @classmethod
    def from_dict(cls, body: dict[str, Any]) -> AcmeProblemError:
        """Build from a decoded ``application/problem+json`` body."""
        return cls(
            body.get("type", "about:blank"),
            body.get("detail", ""),
            body.get("status"),
            title=body.get("title"),
            subproblems=body.get("subproblems"),
        )

    def has_type(self, error_type: str) -> bool:
        return self.error_type == error_type

    @property
    def is_bad_nonce(self) -> bool:
        return self.has_type(BAD_NONCE)


class FeatureMissingError(LocalcertError):
    """The ACME server lacks a capability the issuance flow requires."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"ACME server missing required feature: {feature}")


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class StateError(LocalcertError):
    """An operation does not fit the current state of the issuance."""


class UnexpectedStatusError(StateError):
    """A resource reported a status the current operation cannot act on.

    Parameters
    ----------
    resource_type:
        ``"order"``, ``"authorization"``, or ``"challenge"``.
    status:
        The status as reported (a known enum member or a raw string).

    """

    def __init__(self, resource_type: str, status: object) -> None:
        self.resource_type = resource_type
        self.status = status
        super().__init__(f"unexpected {resource_type} status {str(status)!r}")


class PhaseConsumedError(StateError):
    """A phase was used again after it had already been advanced."""


class StatusWaitTimeout(LocalcertError):
    """The order did not leave a status before the wait deadline."""

    def __init__(self, status: object, timeout: float) -> None:
        self.status = status
        self.timeout = timeout
        super().__init__(
            f"order still {str(status)!r} after {timeout:g}s",
        )


# ---------------------------------------------------------------------------
# Configuration and serialisation
# ---------------------------------------------------------------------------


class InvalidBaseUrlError(LocalcertError):
    """The provisioning base URL cannot be parsed or used as a base."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid base URL: {detail}")


class SerializationError(LocalcertError):
    """Malformed JSON on the request or response path."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"json: {detail}")
