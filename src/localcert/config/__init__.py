"""Configuration subsystem for localcert.

Public API::

    from localcert.config import build_settings, load_settings

    settings = load_settings("config.yaml")      # from a file
    settings = build_settings({"wire": {...}})   # programmatic
"""

from localcert.config.loader import (
    ConfigValidationError,
    coerce_scalars,
    load_settings,
    resolve_env_vars,
    validate_config,
)
from localcert.config.settings import (
    DEFAULT_ACME_POLLING_INTERVAL,
    DEFAULT_SERVER_URL,
    HttpSettings,
    LocalcertSettings,
    LoggingSettings,
    RetrySettings,
    WireSettings,
    build_settings,
)

__all__ = [
    "DEFAULT_ACME_POLLING_INTERVAL",
    "DEFAULT_SERVER_URL",
    "ConfigValidationError",
    "HttpSettings",
    "LocalcertSettings",
    "LoggingSettings",
    "RetrySettings",
    "WireSettings",
    "build_settings",
    "coerce_scalars",
    "load_settings",
    "resolve_env_vars",
    "validate_config",
]
