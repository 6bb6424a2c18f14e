"""Request and response bodies of the provisioning API.

Field names are lowerCamelCase on the wire.  Signed envelopes are
embedded as base64 of their compact JSON bytes so the signer's field
layout never leaks into this schema.

The result key names changed between deployed server revisions, so
they are pinned by :class:`WireRevision`.  ``v2`` is the current
server contract and the default; ``v1`` serves older deployments that
still send the uppercase ``URL`` keys:

=========  ===================  ====================  ===========================
revision   domain result        authorization URL     provisioned challenge URL
=========  ===================  ====================  ===========================
``v1``     ``domain``           ``authorizationURL``  ``provisionedChallengeURL``
``v2``     ``localcertDomain``  ``authorizationUrl``  ``provisionedChallengeUrl``
=========  ===================  ====================  ===========================
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from localcert.errors import SerializationError


class WireRevision(StrEnum):
    V1 = "v1"
    V2 = "v2"


_RESULT_KEYS: dict[WireRevision, dict[str, str]] = {
    WireRevision.V1: {
        "domain": "domain",
        "authorization_url": "authorizationURL",
        "provisioned_challenge_url": "provisionedChallengeURL",
    },
    WireRevision.V2: {
        "domain": "localcertDomain",
        "authorization_url": "authorizationUrl",
        "provisioned_challenge_url": "provisionedChallengeUrl",
    },
}


def b64wrap(value: Any) -> str:  # noqa: ANN401
    """Return standard base64 of *value* serialised as compact JSON."""
    try:
        raw = json.dumps(value, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc
    return base64.b64encode(raw).decode("ascii")


def _require_str(data: Any, key: str) -> str:  # noqa: ANN401
    if not isinstance(data, dict):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise SerializationError(msg)
    value = data.get(key)
    if not isinstance(value, str):
        msg = f"missing or non-string field '{key}'"
        raise SerializationError(msg)
    return value


# ---------------------------------------------------------------------------
# POST {base}/domain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainClaimRequest:
    signed_account_request: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"signedAccountRequest": b64wrap(self.signed_account_request)}


@dataclass(frozen=True)
class DomainClaimResult:
    domain: str

    @classmethod
    def from_dict(
        cls,
        data: Any,  # noqa: ANN401
        revision: WireRevision = WireRevision.V2,
    ) -> DomainClaimResult:
        keys = _RESULT_KEYS[revision]
        return cls(domain=_require_str(data, keys["domain"]))


# ---------------------------------------------------------------------------
# POST {base}/provision
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProvisionRequest:
    account_public_key: dict[str, Any]
    signed_authorization_request: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "accountPublicKey": self.account_public_key,
            "signedAuthorizationRequest": b64wrap(self.signed_authorization_request),
        }


@dataclass(frozen=True)
class ProvisionResult:
    authorization_url: str
    provisioned_challenge_url: str

    @classmethod
    def from_dict(
        cls,
        data: Any,  # noqa: ANN401
        revision: WireRevision = WireRevision.V2,
    ) -> ProvisionResult:
        keys = _RESULT_KEYS[revision]
        return cls(
            authorization_url=_require_str(data, keys["authorization_url"]),
            provisioned_challenge_url=_require_str(
                data,
                keys["provisioned_challenge_url"],
            ),
        )
