"""Client for the provisioning API.

The provisioning service owns the DNS zone of the domain it hands out.
It exposes two endpoints, both taking a JSON body that embeds a JWS
envelope signed with the caller's ACME account key:

**Claim**: ``POST {base}/domain``

Request body (JSON)::

    {"signedAccountRequest": "<base64 of a newAccount JWS>"}

The JWS is addressed to the ACME server's ``newAccount`` URL with
``onlyReturnExisting`` set, so the service can prove the account exists
without creating one.  Response (HTTP 200)::

    {"localcertDomain": "abc123.localcert.net"}

**Provision**: ``POST {base}/provision``

Request body (JSON)::

    {
        "accountPublicKey": {"kty": "EC", ...},
        "signedAuthorizationRequest": "<base64 of a POST-as-GET JWS>"
    }

The JWS is a POST-as-GET of the authorization URL.  The service uses it
to fetch the authorization, publishes the DNS-01 TXT record, and answers
(HTTP 200)::

    {
        "authorizationUrl": "https://acme.example/authz/1",
        "provisionedChallengeUrl": "https://acme.example/chall/1"
    }

Non-2xx responses carry an RFC 7807 problem document where possible.
Result key names depend on the :class:`~localcert.wire.models.WireRevision`;
the bodies shown above use the default ``v2`` names.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

from localcert.errors import (
    AcmeProblemError,
    HttpError,
    InvalidBaseUrlError,
    SerializationError,
)
from localcert.wire.models import (
    DomainClaimRequest,
    DomainClaimResult,
    ProvisionRequest,
    ProvisionResult,
    WireRevision,
)
from localcert.wire.retry import RetryPolicy

if TYPE_CHECKING:
    from localcert.acme.base import AcmeAccount
    from localcert.wire.transport import HttpResponse, HttpTransport

log = logging.getLogger(__name__)

DOMAIN_ENDPOINT = "domain"
PROVISION_ENDPOINT = "provision"

_JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json, application/problem+json",
}


def canonical_base_url(base_url: object) -> str:
    """Return *base_url* with its path ending in exactly one ``/``.

    Query strings and fragments are dropped since endpoint names are
    appended to the path.

    Raises
    ------
    InvalidBaseUrlError
        If the value is not an absolute ``http``/``https`` URL.

    """
    if not isinstance(base_url, str) or not base_url.strip():
        msg = f"expected a non-empty URL string, got {base_url!r}"
        raise InvalidBaseUrlError(msg)
    try:
        parts = urlsplit(base_url.strip())
    except ValueError as exc:
        raise InvalidBaseUrlError(str(exc)) from exc
    if parts.scheme not in ("http", "https"):
        msg = f"unsupported scheme in {base_url!r}; cannot be a base URL"
        raise InvalidBaseUrlError(msg)
    if not parts.netloc:
        msg = f"no host in {base_url!r}"
        raise InvalidBaseUrlError(msg)
    path = parts.path.rstrip("/") + "/"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


class ProvisioningClient:
    """Signs and sends requests to the provisioning API.

    Parameters
    ----------
    transport:
        HTTP transport shared with other sessions.
    base_url:
        Root of the provisioning API, e.g. ``https://localcert.dev``.
    retry_policy:
        Which failures are retried with a freshly signed envelope.
        Defaults to one retry on ``badNonce``.
    revision:
        Result field naming of the deployed server.

    """

    def __init__(
        self,
        transport: HttpTransport,
        base_url: str,
        *,
        retry_policy: RetryPolicy | None = None,
        revision: WireRevision = WireRevision.V2,
    ) -> None:
        self._transport = transport
        self._base_url = canonical_base_url(base_url)
        self._retry = retry_policy if retry_policy is not None else RetryPolicy()
        self._revision = WireRevision(revision)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    def endpoint_url(self, name: str) -> str:
        return self._base_url + name.lstrip("/")

    # -- operations ----------------------------------------------------------

    def claim_domain(self, account: AcmeAccount) -> DomainClaimResult:
        """Return the domain assigned to *account*."""
        return self._retry.run(
            lambda: self._claim_domain_once(account),
            name="domain claim",
        )

    def _claim_domain_once(self, account: AcmeAccount) -> DomainClaimResult:
        signed = account.sign_request(
            account.new_account_url,
            {"onlyReturnExisting": True},
            use_jwk=True,
        )
        request = DomainClaimRequest(signed_account_request=signed)
        data = self._post(DOMAIN_ENDPOINT, request.to_dict())
        result = DomainClaimResult.from_dict(data, self._revision)
        log.info("Claimed domain %s", result.domain)
        return result

    def provision(
        self,
        account: AcmeAccount,
        authorization_url: str,
    ) -> ProvisionResult:
        """Ask the service to publish the DNS-01 record for an authorization."""
        return self._retry.run(
            lambda: self._provision_once(account, authorization_url),
            name="provision",
        )

    def _provision_once(
        self,
        account: AcmeAccount,
        authorization_url: str,
    ) -> ProvisionResult:
        signed = account.sign_request(authorization_url, None)
        request = ProvisionRequest(
            account_public_key=account.public_jwk(),
            signed_authorization_request=signed,
        )
        data = self._post(PROVISION_ENDPOINT, request.to_dict())
        result = ProvisionResult.from_dict(data, self._revision)
        log.info(
            "Provisioned DNS record for %s (challenge %s)",
            result.authorization_url,
            result.provisioned_challenge_url,
        )
        return result

    # -- transport -----------------------------------------------------------

    def _post(self, endpoint: str, payload: dict[str, Any]) -> Any:  # noqa: ANN401
        """POST *payload* as JSON and return the decoded 2xx body."""
        url = self.endpoint_url(endpoint)
        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(str(exc)) from exc

        log.debug("POST %s", url)
        resp = self._transport.post(url, body, dict(_JSON_HEADERS))

        if not resp.ok:
            problem = _decode_problem(resp)
            if problem is not None:
                log.debug("%s returned problem %s", url, problem.error_type)
                raise problem
            raise HttpError(resp.status, resp.text())

        try:
            return json.loads(resp.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SerializationError(str(exc)) from exc


def _decode_problem(resp: HttpResponse) -> AcmeProblemError | None:
    """Parse an RFC 7807 body, or return ``None`` if there is none."""
    if not resp.body:
        return None
    try:
        data = json.loads(resp.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        return None
    problem = AcmeProblemError.from_dict(data)
    if problem.status is None:
        problem.status = resp.status
    return problem
