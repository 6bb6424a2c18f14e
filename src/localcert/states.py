"""Issuance phases for a single-domain DNS-01 certificate.

An issuance moves through four phase objects, each exposing only the
operations legal for it::

    registered = SessionBuilder(transport).build_with_account(account)
    ordered = registered.new_order()          # or resume_order(url)
    authorized = ordered.authorize()
    finalized = authorized.finalize_with_csr(csr_der)
    pem_chain = finalized.get_certificate()

Every operation consumes the phase it is called on, whether it succeeds
or fails: a consumed phase raises :class:`PhaseConsumedError` on any
further use.  Progress is never lost, because the order lives on the
ACME server; persist :attr:`OrderedState.order_url` and pick it up
again with :meth:`RegisteredState.resume_order` from a new session.

Waiting for the ACME server is a polling loop: the order is re-fetched
every ``polling_interval`` seconds until its status moves on, or until
the optional ``status_wait_timeout`` elapses.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, TypeVar

from localcert.core.csr import csr_to_der
from localcert.core.state import assert_transition, log_transition, resume_phase
from localcert.core.types import (
    AuthorizationStatus,
    ChallengeStatus,
    ChallengeType,
    OrderStatus,
    Phase,
)
from localcert.errors import (
    FeatureMissingError,
    PhaseConsumedError,
    StateError,
    StatusWaitTimeout,
    UnexpectedStatusError,
)

if TYPE_CHECKING:
    from cryptography import x509

    from localcert.acme.base import (
        AcmeAccount,
        AcmeAuthorization,
        AcmeOrder,
        GeneratedKey,
    )
    from localcert.wire.client import ProvisioningClient

log = logging.getLogger(__name__)

_UNSET = object()

_PhaseT = TypeVar("_PhaseT", bound="_PhaseState")


class _Session:
    """Everything an issuance carries from phase to phase."""

    __slots__ = (
        "account",
        "client",
        "order",
        "polling_interval",
        "status_wait_timeout",
    )

    def __init__(
        self,
        client: ProvisioningClient,
        account: AcmeAccount,
        polling_interval: float,
        status_wait_timeout: float | None,
    ) -> None:
        self.client = client
        self.account = account
        self.order: AcmeOrder | None = None
        self.polling_interval = polling_interval
        self.status_wait_timeout = status_wait_timeout

    @property
    def order_url(self) -> str | None:
        return self.order.url if self.order is not None else None

    def order_status(self) -> OrderStatus | str:
        return OrderStatus.parse(self.order.status)  # type: ignore[union-attr]

    def order_status_changed_from(
        self,
        stale: OrderStatus,
        timeout: float | None | object = _UNSET,
    ) -> OrderStatus | str:
        """Poll the order until its status differs from *stale*.

        Parameters
        ----------
        stale:
            The status the order is expected to leave.
        timeout:
            Seconds to wait before giving up; ``None`` waits forever.
            Defaults to the session's ``status_wait_timeout``.

        Raises
        ------
        StatusWaitTimeout
            If the deadline passes with the status unchanged.

        """
        if timeout is _UNSET:
            timeout = self.status_wait_timeout
        deadline = None if timeout is None else time.monotonic() + timeout  # type: ignore[operator]

        status = self.order_status()
        while status == stale:
            delay = self.polling_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise StatusWaitTimeout(status, timeout)  # type: ignore[arg-type]
                delay = min(delay, remaining)
            log.debug(
                "Order %s still %s; rechecking in %.1fs",
                self.order_url,
                status,
                delay,
            )
            time.sleep(delay)
            self.order.refresh()  # type: ignore[union-attr]
            status = self.order_status()
        return status


class _PhaseState:
    """Base for phase objects; owns the session until advanced."""

    phase: ClassVar[Phase]

    def __init__(self, session: _Session) -> None:
        self._session: _Session | None = session

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else self.order_url
        return f"<{type(self).__name__} {state}>"

    @property
    def consumed(self) -> bool:
        return self._session is None

    @property
    def order_url(self) -> str | None:
        return self._live().order_url

    def _live(self) -> _Session:
        if self._session is None:
            msg = f"{self.phase.value} phase has already been advanced"
            raise PhaseConsumedError(msg)
        return self._session

    def _take(self) -> _Session:
        session = self._live()
        self._session = None
        return session

    def _advance(
        self,
        session: _Session,
        target: type[_PhaseT],
        *,
        reason: str | None = None,
    ) -> _PhaseT:
        assert_transition(self.phase, target.phase)
        log_transition(session.order_url, self.phase, target.phase, reason=reason)
        return target(session)


# ---------------------------------------------------------------------------
# Registered
# ---------------------------------------------------------------------------


class RegisteredState(_PhaseState):
    """An account exists; no order has been opened yet."""

    phase = Phase.REGISTERED

    def __init__(
        self,
        client: ProvisioningClient,
        account: AcmeAccount,
        polling_interval: float,
        status_wait_timeout: float | None = None,
    ) -> None:
        super().__init__(
            _Session(client, account, polling_interval, status_wait_timeout),
        )

    @property
    def account(self) -> AcmeAccount:
        return self._live().account

    def new_order(self) -> OrderedState:
        """Claim the account's domain and open an order for it."""
        session = self._take()
        domain = session.client.claim_domain(session.account).domain
        session.order = session.account.new_dns_order(domain)
        return self._advance(session, OrderedState, reason=f"new order for {domain}")

    def with_order(self, order: AcmeOrder) -> OrderedState:
        """Continue with an order the caller already created."""
        session = self._take()
        session.order = order
        return self._advance(session, OrderedState)

    def resume_order(self, order_url: str) -> ResumeOrderState:
        """Fetch an existing order and enter the phase its status implies.

        Raises
        ------
        UnexpectedStatusError
            If the order is ``invalid`` or reports an unknown status.

        """
        session = self._take()
        session.order = session.account.get_order(order_url)
        status = session.order_status()
        phase = resume_phase(status)
        target = _RESUME_TARGETS[phase]
        state = self._advance(session, target, reason=f"resumed at {status}")
        return ResumeOrderState(phase=phase, state=state)


# ---------------------------------------------------------------------------
# Ordered
# ---------------------------------------------------------------------------


class OrderedState(_PhaseState):
    """An order is open and its authorization may still be pending."""

    phase = Phase.ORDERED

    @property
    def order(self) -> AcmeOrder:
        return self._live().order  # type: ignore[return-value]

    def authorize(self) -> AuthorizedState:
        """Get the order's authorization validated via DNS-01.

        Does nothing for orders that are no longer pending, so it is
        safe to call on a resumed order.
        """
        session = self._take()
        if session.order_status() == OrderStatus.PENDING:
            authorization = session.order.get_only_authorization()  # type: ignore[union-attr]
            _authorize(session.client, session.account, authorization)
            session.order_status_changed_from(OrderStatus.PENDING)
        return self._advance(session, AuthorizedState)


def _authorize(
    client: ProvisioningClient,
    account: AcmeAccount,
    authorization: AcmeAuthorization,
) -> None:
    """Provision the DNS record for *authorization* and trigger validation."""
    status = AuthorizationStatus.parse(authorization.status)
    if status == AuthorizationStatus.VALID:
        log.debug("Authorization %s already valid", authorization.url)
        return
    if status != AuthorizationStatus.PENDING:
        raise UnexpectedStatusError("authorization", status)

    challenge = authorization.find_challenge(ChallengeType.DNS_01)
    if challenge is None:
        raise FeatureMissingError("no dns-01 challenge")

    result = client.provision(account, authorization.url)

    # The service must have provisioned exactly the challenge we are
    # about to respond to.
    if result.provisioned_challenge_url != challenge.url:
        msg = (
            "provisioned challenge doesn't match DNS-01 challenge: "
            f"{result.provisioned_challenge_url!r} != {challenge.url!r}"
        )
        raise StateError(msg)

    if ChallengeStatus.parse(challenge.status) == ChallengeStatus.PENDING:
        log.info("Responding to DNS-01 challenge %s", challenge.url)
        challenge.respond()


# ---------------------------------------------------------------------------
# Authorized
# ---------------------------------------------------------------------------


class AuthorizedState(_PhaseState):
    """The order is expected to be ready for finalisation."""

    phase = Phase.AUTHORIZED

    def _ready_session(self) -> _Session:
        session = self._take()
        status = session.order_status()
        if status != OrderStatus.READY:
            raise UnexpectedStatusError("order", status)
        return session

    def finalize_with_generated_key(self) -> tuple[GeneratedKey, FinalizedState]:
        """Finalise with a freshly generated key; return the key too."""
        session = self._ready_session()
        generated_key = session.order.finalize_with_generated_key()  # type: ignore[union-attr]
        return generated_key, self._advance(
            session,
            FinalizedState,
            reason="generated key",
        )

    def finalize_with_csr(
        self,
        csr: bytes | x509.CertificateSigningRequest,
    ) -> FinalizedState:
        """Finalise with a caller-supplied CSR (DER bytes or parsed)."""
        session = self._ready_session()
        session.order.finalize(csr_to_der(csr))  # type: ignore[union-attr]
        return self._advance(session, FinalizedState, reason="caller CSR")


# ---------------------------------------------------------------------------
# Finalized
# ---------------------------------------------------------------------------


class FinalizedState(_PhaseState):
    """The CSR has been submitted; the certificate is being issued."""

    phase = Phase.FINALIZED

    def get_certificate(self) -> str:
        """Wait for issuance and return the PEM certificate chain."""
        session = self._take()
        status = session.order_status_changed_from(OrderStatus.PROCESSING)
        if status != OrderStatus.VALID:
            raise UnexpectedStatusError("order", status)
        chain = session.order.certificate_chain()  # type: ignore[union-attr]
        assert_transition(self.phase, Phase.COMPLETE)
        log_transition(session.order_url, self.phase, Phase.COMPLETE)
        return chain


_RESUME_TARGETS: dict[Phase, type[_PhaseState]] = {
    Phase.ORDERED: OrderedState,
    Phase.AUTHORIZED: AuthorizedState,
    Phase.FINALIZED: FinalizedState,
}


@dataclass(frozen=True)
class ResumeOrderState:
    """Result of :meth:`RegisteredState.resume_order`.

    Attributes
    ----------
    phase:
        Which phase the order resumed into.
    state:
        The phase object itself.

    """

    phase: Phase
    state: OrderedState | AuthorizedState | FinalizedState

    @property
    def ordered(self) -> OrderedState | None:
        return self.state if isinstance(self.state, OrderedState) else None

    @property
    def authorized(self) -> AuthorizedState | None:
        return self.state if isinstance(self.state, AuthorizedState) else None

    @property
    def finalized(self) -> FinalizedState | None:
        return self.state if isinstance(self.state, FinalizedState) else None
