"""In-memory stand-ins for the ACME engine and the HTTP transport.

The fake order walks through a scripted list of statuses, one step per
``refresh()``, which is enough to drive every polling path of the
issuance phases.
"""

from __future__ import annotations

import json
from collections.abc import Callable

from localcert.acme.base import (
    AcmeAccount,
    AcmeAuthorization,
    AcmeChallenge,
    AcmeOrder,
)
from localcert.core.jws import AccountKey
from localcert.wire.transport import HttpResponse, HttpTransport

ACME_ROOT = "https://acme.example.test"
ACCOUNT_URL = f"{ACME_ROOT}/acct/1"
ORDER_URL = f"{ACME_ROOT}/order/1"
AUTHZ_URL = f"{ACME_ROOT}/authz/1"
DNS_CHALLENGE_URL = f"{ACME_ROOT}/chall/dns"
HTTP_CHALLENGE_URL = f"{ACME_ROOT}/chall/http"
PROVISION_BASE = "https://localcert.example.test"
DOMAIN = "abc123.localcert.example.test"


# ---------------------------------------------------------------------------
# Fake ACME engine
# ---------------------------------------------------------------------------


class FakeChallenge(AcmeChallenge):
    def __init__(self, url: str, type_: str, status: str = "pending") -> None:
        self._url = url
        self._type = type_
        self._status = status
        self.respond_calls = 0

    @property
    def url(self) -> str:
        return self._url

    @property
    def type(self) -> str:
        return self._type

    @property
    def status(self) -> str:
        return self._status

    def respond(self) -> None:
        self.respond_calls += 1
        self._status = "processing"


class FakeAuthorization(AcmeAuthorization):
    def __init__(
        self,
        url: str = AUTHZ_URL,
        status: str = "pending",
        challenges: list[FakeChallenge] | None = None,
    ) -> None:
        self._url = url
        self._status = status
        if challenges is None:
            challenges = [
                FakeChallenge(HTTP_CHALLENGE_URL, "http-01"),
                FakeChallenge(DNS_CHALLENGE_URL, "dns-01"),
            ]
        self._challenges = challenges

    @property
    def url(self) -> str:
        return self._url

    @property
    def status(self) -> str:
        return self._status

    @property
    def challenges(self) -> list[FakeChallenge]:
        return self._challenges


class FakeOrder(AcmeOrder):
    """Order whose status walks through *statuses*, one step per refresh."""

    def __init__(
        self,
        statuses: list[str] | str = "pending",
        *,
        url: str = ORDER_URL,
        identifiers: tuple[str, ...] = (DOMAIN,),
        authorizations: list[FakeAuthorization] | None = None,
        chain: str = "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n",
    ) -> None:
        self._statuses = [statuses] if isinstance(statuses, str) else list(statuses)
        self._index = 0
        self._url = url
        self._identifiers = identifiers
        self._authorizations = (
            authorizations if authorizations is not None else [FakeAuthorization()]
        )
        self._chain = chain
        self.refresh_calls = 0
        self.finalized_with: list[bytes] = []

    @property
    def url(self) -> str:
        return self._url

    @property
    def status(self) -> str:
        return self._statuses[self._index]

    @property
    def identifiers(self) -> tuple[str, ...]:
        return self._identifiers

    def refresh(self) -> None:
        self.refresh_calls += 1
        if self._index < len(self._statuses) - 1:
            self._index += 1

    def authorizations(self) -> list[FakeAuthorization]:
        return self._authorizations

    def finalize(self, csr_der: bytes) -> None:
        self.finalized_with.append(csr_der)

    def certificate_chain(self) -> str:
        return self._chain


class FakeAccount(AcmeAccount):
    def __init__(
        self,
        key: AccountKey,
        *,
        orders: dict[str, FakeOrder] | None = None,
        new_order: FakeOrder | None = None,
    ) -> None:
        self._key = key
        self._orders = orders or {}
        self._new_order = new_order
        self.ordered_domains: list[str] = []
        self._nonce_counter = 0

    @property
    def url(self) -> str:
        return ACCOUNT_URL

    @property
    def key(self) -> AccountKey:
        return self._key

    @property
    def new_account_url(self) -> str:
        return f"{ACME_ROOT}/new-acct"

    def new_nonce(self) -> str:
        self._nonce_counter += 1
        return f"nonce-{self._nonce_counter}"

    def new_dns_order(self, domain: str) -> FakeOrder:
        self.ordered_domains.append(domain)
        return self._new_order or FakeOrder(identifiers=(domain,))

    def get_order(self, order_url: str) -> FakeOrder:
        return self._orders[order_url]


# ---------------------------------------------------------------------------
# Scripted transport
# ---------------------------------------------------------------------------


class ScriptedTransport(HttpTransport):
    """Returns queued responses in order and records every request."""

    def __init__(self, *responses: HttpResponse | Callable[[], HttpResponse]) -> None:
        self._responses = list(responses)
        self.requests: list[tuple[str, dict, dict[str, str]]] = []

    def queue(self, *responses: HttpResponse) -> None:
        self._responses.extend(responses)

    def post(self, url: str, body: bytes, headers: dict[str, str]) -> HttpResponse:
        self.requests.append((url, json.loads(body), headers))
        if not self._responses:
            msg = f"unexpected request to {url}"
            raise AssertionError(msg)
        response = self._responses.pop(0)
        return response() if callable(response) else response

    def urls(self) -> list[str]:
        return [url for url, _, _ in self.requests]


def json_response(status: int, body: object) -> HttpResponse:
    return HttpResponse(status=status, body=json.dumps(body).encode("utf-8"))


def problem_response(error_type: str, detail: str = "", status: int = 400) -> HttpResponse:
    return json_response(status, {"type": error_type, "detail": detail, "status": status})


