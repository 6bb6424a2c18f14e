"""Root conftest for the localcert test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import yaml

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from fakes import FakeAccount  # noqa: E402

from localcert.core.jws import AccountKey  # noqa: E402

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def account_key() -> AccountKey:
    return AccountKey.generate()


@pytest.fixture()
def account(account_key: AccountKey) -> FakeAccount:
    return FakeAccount(account_key)


@pytest.fixture()
def minimal_config_data() -> dict:
    """Return a dict containing a small but complete config."""
    return {
        "server_url": "https://localcert.example.com",
        "acme_polling_interval": 1,
        "logging": {"level": "DEBUG", "format": "json"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, minimal_config_data: dict) -> Path:
    """Write *minimal_config_data* to a temp YAML file and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        yaml.safe_dump(minimal_config_data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return cfg
