"""Abstract base classes for the ACME engine.

The issuance state machine never speaks ACME itself.  It drives an
external engine through the small surface defined here: accounts that
can sign requests, orders that can be refreshed and finalised,
authorizations that list their challenges, and challenges that can be
responded to.

Statuses are exposed as the raw strings the ACME server returned;
callers parse them with :meth:`localcert.core.types.OrderStatus.parse`
and friends so unknown values never crash the flow.

Engines report ACME protocol failures by raising
:class:`~localcert.errors.AcmeProblemError`; a rejected nonce must use
the ``badNonce`` error type so the provisioning client can retry it.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from localcert.core.csr import generate_key_and_csr, private_key_pem
from localcert.core.jws import sign_flattened
from localcert.errors import StateError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from localcert.core.jws import AccountKey

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedKey:
    """Private key and CSR produced by :meth:`AcmeOrder.finalize_with_generated_key`.

    Attributes
    ----------
    private_key_pem:
        PKCS#8 PEM of the certificate's private key.
    csr_der:
        The DER CSR that was submitted to the server.

    """

    private_key_pem: str
    csr_der: bytes


class AcmeChallenge(abc.ABC):
    """One validation method offered under an authorization."""

    @property
    @abc.abstractmethod
    def url(self) -> str: ...

    @property
    @abc.abstractmethod
    def type(self) -> str:
        """Challenge type tag, e.g. ``"dns-01"``."""

    @property
    @abc.abstractmethod
    def status(self) -> str: ...

    @abc.abstractmethod
    def respond(self) -> None:
        """Tell the server the challenge is ready to be validated."""


class AcmeAuthorization(abc.ABC):
    """Proof-of-control record for one identifier."""

    @property
    @abc.abstractmethod
    def url(self) -> str: ...

    @property
    @abc.abstractmethod
    def status(self) -> str: ...

    @property
    @abc.abstractmethod
    def challenges(self) -> Sequence[AcmeChallenge]: ...

    def find_challenge(self, challenge_type: str) -> AcmeChallenge | None:
        """Return the first challenge of *challenge_type*, or ``None``."""
        for challenge in self.challenges:
            if challenge.type == challenge_type:
                return challenge
        return None


class AcmeOrder(abc.ABC):
    """A certificate order as tracked by the ACME server."""

    @property
    @abc.abstractmethod
    def url(self) -> str:
        """Order URL; persisting it allows the order to be resumed."""

    @property
    @abc.abstractmethod
    def status(self) -> str: ...

    @property
    @abc.abstractmethod
    def identifiers(self) -> Sequence[str]:
        """DNS names the order covers."""

    @abc.abstractmethod
    def refresh(self) -> None:
        """Re-fetch the order so :attr:`status` reflects the server."""

    @abc.abstractmethod
    def authorizations(self) -> list[AcmeAuthorization]: ...

    @abc.abstractmethod
    def finalize(self, csr_der: bytes) -> None:
        """Submit a DER CSR to the order's finalize URL."""

    @abc.abstractmethod
    def certificate_chain(self) -> str:
        """Download the issued PEM certificate chain."""

    def get_only_authorization(self) -> AcmeAuthorization:
        """Return the single authorization of a single-domain order.

        Raises
        ------
        StateError
            If the order has zero or several authorizations.

        """
        authorizations = self.authorizations()
        if len(authorizations) != 1:
            msg = f"expected exactly one authorization, order has {len(authorizations)}"
            raise StateError(msg)
        return authorizations[0]

    def finalize_with_generated_key(self) -> GeneratedKey:
        """Generate a key and CSR for this order and finalise with it.

        Engines that generate keys server-side or in an HSM may
        override this.
        """
        key, csr_der = generate_key_and_csr(list(self.identifiers))
        self.finalize(csr_der)
        log.debug("Finalised order %s with a generated P-256 key", self.url)
        return GeneratedKey(private_key_pem=private_key_pem(key), csr_der=csr_der)


class AcmeAccount(abc.ABC):
    """A registered ACME account bound to its signing key."""

    @property
    @abc.abstractmethod
    def url(self) -> str:
        """Account URL, used as ``kid`` in signed requests."""

    @property
    @abc.abstractmethod
    def key(self) -> AccountKey: ...

    @property
    @abc.abstractmethod
    def new_account_url(self) -> str:
        """The server's ``newAccount`` endpoint from its directory."""

    @abc.abstractmethod
    def new_nonce(self) -> str:
        """Fetch a fresh replay nonce from the server."""

    @abc.abstractmethod
    def new_dns_order(self, domain: str) -> AcmeOrder: ...

    @abc.abstractmethod
    def get_order(self, order_url: str) -> AcmeOrder: ...

    def public_jwk(self) -> dict[str, Any]:
        return self.key.public_jwk()

    def sign_request(
        self,
        url: str,
        payload: Any,  # noqa: ANN401
        *,
        use_jwk: bool = False,
    ) -> dict[str, str]:
        """Sign a request to *url* with a fresh nonce.

        Parameters
        ----------
        url:
            Target URL bound into the protected header.
        payload:
            JSON-serialisable body, or ``None`` for POST-as-GET.
        use_jwk:
            Embed the public JWK instead of the account ``kid``.

        """
        return sign_flattened(
            self.key,
            url=url,
            nonce=self.new_nonce(),
            payload=payload,
            kid=None if use_jwk else self.url,
        )


class AcmeDirectory(abc.ABC):
    """Entry point to an ACME server, able to create accounts."""

    @abc.abstractmethod
    def register_account(
        self,
        key: AccountKey,
        *,
        contact: Sequence[str] = (),
        terms_of_service_agreed: bool = True,
        only_return_existing: bool = False,
    ) -> AcmeAccount:
        """Create (or look up) the account for *key*."""
