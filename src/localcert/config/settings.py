"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the library actually reads.

Access pattern::

    from localcert.config import build_settings

    settings = build_settings({"server_url": "https://localcert.example"})
    settings.acme_polling_interval     # 5.0
"""

from __future__ import annotations

from dataclasses import dataclass

from localcert.errors import BAD_NONCE

DEFAULT_SERVER_URL = "https://localcert.dev"
DEFAULT_ACME_POLLING_INTERVAL = 5.0

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HttpSettings:
    """Transport options for the default urllib transport."""

    timeout_seconds: float
    ca_cert_path: str | None
    user_agent: str


def _build_http(data: dict | None) -> HttpSettings:
    d = data or {}
    return HttpSettings(
        timeout_seconds=d.get("timeout_seconds", 30),
        ca_cert_path=d.get("ca_cert_path"),
        user_agent=d.get("user_agent", "localcert-python"),
    )


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetrySettings:
    """Re-signing retry policy for provisioning requests."""

    max_attempts: int
    retryable_types: tuple[str, ...]


def _build_retry(data: dict | None) -> RetrySettings:
    d = data or {}
    return RetrySettings(
        max_attempts=d.get("max_attempts", 2),
        retryable_types=tuple(d.get("retryable_types", [BAD_NONCE])),
    )


# ---------------------------------------------------------------------------
# Wire
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WireSettings:
    """Provisioning API contract revision."""

    revision: str


def _build_wire(data: dict | None) -> WireSettings:
    d = data or {}
    return WireSettings(revision=d.get("revision", "v2"))


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and output format (``text`` or ``json``)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "text"),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocalcertSettings:
    """Root settings object."""

    server_url: str
    acme_polling_interval: float
    status_wait_timeout: float | None
    http: HttpSettings
    retry: RetrySettings
    wire: WireSettings
    logging: LoggingSettings


def build_settings(data: dict | None = None) -> LocalcertSettings:
    """Build the full settings tree from a (validated) config dict."""
    d = data or {}
    return LocalcertSettings(
        server_url=d.get("server_url", DEFAULT_SERVER_URL),
        acme_polling_interval=float(
            d.get("acme_polling_interval", DEFAULT_ACME_POLLING_INTERVAL),
        ),
        status_wait_timeout=d.get("status_wait_timeout"),
        http=_build_http(d.get("http")),
        retry=_build_retry(d.get("retry")),
        wire=_build_wire(d.get("wire")),
        logging=_build_logging(d.get("logging")),
    )
