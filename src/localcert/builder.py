"""Entry point: turn an ACME account into a Registered issuance phase.

Usage::

    from localcert import SessionBuilder

    registered = (
        SessionBuilder()
        .server_url("https://localcert.example")
        .acme_polling_interval(2)
        .build_with_account(account)
    )

Values not set explicitly come from the :class:`LocalcertSettings`
passed in (or the built-in defaults).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from localcert.config.settings import LocalcertSettings, build_settings
from localcert.states import RegisteredState
from localcert.wire.client import ProvisioningClient
from localcert.wire.models import WireRevision
from localcert.wire.retry import RetryPolicy
from localcert.wire.transport import UrllibTransport

if TYPE_CHECKING:
    from collections.abc import Sequence

    from localcert.acme.base import AcmeAccount, AcmeDirectory
    from localcert.core.jws import AccountKey
    from localcert.wire.transport import HttpTransport

log = logging.getLogger(__name__)


class SessionBuilder:
    """Collects configuration and builds :class:`RegisteredState` objects.

    Parameters
    ----------
    transport:
        HTTP transport for the provisioning API.  Defaults to a
        :class:`UrllibTransport` configured from ``settings.http``.
    settings:
        Base settings; defaults to :func:`build_settings` with no input.

    """

    def __init__(
        self,
        transport: HttpTransport | None = None,
        *,
        settings: LocalcertSettings | None = None,
    ) -> None:
        self._settings = settings if settings is not None else build_settings()
        self._transport = transport
        self._server_url = self._settings.server_url
        self._polling_interval = self._settings.acme_polling_interval
        self._status_wait_timeout = self._settings.status_wait_timeout
        self._retry_policy = RetryPolicy(
            max_attempts=self._settings.retry.max_attempts,
            retryable_types=frozenset(self._settings.retry.retryable_types),
        )
        self._revision = WireRevision(self._settings.wire.revision)

    # -- overrides -----------------------------------------------------------

    def server_url(self, url: str) -> SessionBuilder:
        self._server_url = url
        return self

    def acme_polling_interval(self, seconds: float) -> SessionBuilder:
        self._polling_interval = float(seconds)
        return self

    def status_wait_timeout(self, seconds: float | None) -> SessionBuilder:
        self._status_wait_timeout = seconds
        return self

    def retry_policy(self, policy: RetryPolicy) -> SessionBuilder:
        self._retry_policy = policy
        return self

    def wire_revision(self, revision: WireRevision | str) -> SessionBuilder:
        self._revision = WireRevision(revision)
        return self

    # -- building ------------------------------------------------------------

    def _get_transport(self) -> HttpTransport:
        if self._transport is None:
            http = self._settings.http
            self._transport = UrllibTransport(
                timeout_seconds=http.timeout_seconds,
                ca_cert_path=http.ca_cert_path,
                user_agent=http.user_agent,
            )
        return self._transport

    def build_client(self) -> ProvisioningClient:
        """Return a provisioning client for the configured server.

        Raises
        ------
        InvalidBaseUrlError
            If the server URL is unusable.

        """
        return ProvisioningClient(
            self._get_transport(),
            self._server_url,
            retry_policy=self._retry_policy,
            revision=self._revision,
        )

    def build_with_account(self, account: AcmeAccount) -> RegisteredState:
        """Start an issuance session for an existing ACME account."""
        client = self.build_client()
        log.debug(
            "Session for account %s against %s",
            account.url,
            client.base_url,
        )
        return RegisteredState(
            client,
            account,
            self._polling_interval,
            self._status_wait_timeout,
        )

    def register_new_account(
        self,
        directory: AcmeDirectory,
        key: AccountKey,
        *,
        contact: Sequence[str] = (),
        terms_of_service_agreed: bool = True,
    ) -> RegisteredState:
        """Register (or look up) the account for *key*, then start a session."""
        client = self.build_client()
        account = directory.register_account(
            key,
            contact=contact,
            terms_of_service_agreed=terms_of_service_agreed,
        )
        log.info("Registered ACME account %s", account.url)
        return RegisteredState(
            client,
            account,
            self._polling_interval,
            self._status_wait_timeout,
        )
