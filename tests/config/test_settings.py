"""Tests for localcert.config.settings: defaults and builders."""

from __future__ import annotations

import dataclasses

import pytest

from localcert.config.settings import (
    DEFAULT_ACME_POLLING_INTERVAL,
    DEFAULT_SERVER_URL,
    LocalcertSettings,
    build_settings,
)
from localcert.errors import BAD_NONCE


class TestDefaults:
    def test_empty_input(self):
        settings = build_settings()

        assert settings.server_url == DEFAULT_SERVER_URL == "https://localcert.dev"
        assert settings.acme_polling_interval == DEFAULT_ACME_POLLING_INTERVAL == 5.0
        assert settings.status_wait_timeout is None
        assert settings.http.timeout_seconds == 30
        assert settings.http.ca_cert_path is None
        assert settings.http.user_agent == "localcert-python"
        assert settings.retry.max_attempts == 2
        assert settings.retry.retryable_types == (BAD_NONCE,)
        assert settings.wire.revision == "v2"
        assert settings.logging.level == "INFO"
        assert settings.logging.format == "text"

    def test_none_and_empty_dict_agree(self):
        assert build_settings(None) == build_settings({})


class TestOverrides:
    def test_partial_sections_keep_defaults(self):
        settings = build_settings(
            {
                "acme_polling_interval": 2,
                "status_wait_timeout": 120,
                "http": {"ca_cert_path": "/etc/ssl/local.pem"},
                "wire": {"revision": "v1"},
            },
        )

        assert settings.acme_polling_interval == 2.0
        assert isinstance(settings.acme_polling_interval, float)
        assert settings.status_wait_timeout == 120
        assert settings.http.ca_cert_path == "/etc/ssl/local.pem"
        assert settings.http.timeout_seconds == 30
        assert settings.wire.revision == "v1"

    def test_retryable_types_become_tuple(self):
        settings = build_settings({"retry": {"retryable_types": ["a", "b"]}})
        assert settings.retry.retryable_types == ("a", "b")


def test_settings_are_frozen():
    settings = build_settings()
    assert isinstance(settings, LocalcertSettings)
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.server_url = "https://other.test"  # type: ignore[misc]
