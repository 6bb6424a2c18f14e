"""Load localcert settings from a YAML or JSON file.

Lifecycle::

    settings = load_settings("/etc/localcert/config.yaml")
    registered = SessionBuilder(settings=settings).build_with_account(account)

String values may reference the environment as ``${VAR}`` or
``${VAR:-default}``; references are resolved **before** schema
validation so substituted values are checked too.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from localcert.config.settings import LocalcertSettings, build_settings
from localcert.errors import InvalidBaseUrlError
from localcert.wire.client import canonical_base_url

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

log = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when schema or cross-field validation finds problems."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_value(value: str, path: str) -> str:
    """Replace ``${VAR}`` or ``${VAR:-default}`` with env var value."""
    match = _ENV_RE.match(value)
    if match is None:
        return value
    var_name = match.group(1)
    fallback = match.group(2)
    resolved = os.environ.get(var_name)
    if resolved is not None:
        return resolved
    if fallback is not None:
        return fallback
    raise ConfigValidationError(
        [
            f"Environment variable '${{{var_name}}}' referenced "
            f"at '{path}' is not set and has no default",
        ],
    )


def resolve_env_vars(
    data: Any,  # noqa: ANN401
    path: str = "",
) -> None:
    """Walk *data* in-place and resolve ``${VAR}``/``${VAR:-default}`` strings."""
    if isinstance(data, dict):
        for key in data:
            child_path = f"{path}.{key}" if path else key
            if isinstance(data[key], str):
                data[key] = _resolve_value(data[key], child_path)
            elif isinstance(data[key], (dict, list)):
                resolve_env_vars(data[key], child_path)
    elif isinstance(data, list):
        for idx, item in enumerate(data):
            child_path = f"{path}[{idx}]"
            if isinstance(item, str):
                data[idx] = _resolve_value(item, child_path)
            elif isinstance(item, (dict, list)):
                resolve_env_vars(item, child_path)


def _coerce_scalar(value: str, schema: dict) -> Any:  # noqa: ANN401
    types = schema.get("type", [])
    if isinstance(types, str):
        types = [types]
    if "string" in types:
        return value
    text = value.strip()
    if "null" in types and text in ("", "null", "~"):
        return None
    if "integer" in types or "number" in types:
        try:
            return int(text)
        except ValueError:
            pass
    if "number" in types:
        try:
            return float(text)
        except ValueError:
            pass
    return value


def coerce_scalars(
    data: dict,
    schema: dict,
) -> None:
    """Convert string values in numeric schema fields to numbers, in-place.

    Environment references always resolve to strings; this lets
    ``acme_polling_interval: ${POLL}`` validate as a number.  Strings
    that do not parse are left alone for the schema to report.
    """
    for key, sub_schema in schema.get("properties", {}).items():
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, dict):
            coerce_scalars(value, sub_schema)
        elif isinstance(value, str):
            data[key] = _coerce_scalar(value, sub_schema)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _load_schema() -> dict:
    with _SCHEMA_PATH.open(encoding="utf-8") as f:
        return json.load(f)


def validate_config(data: dict) -> None:
    """Check *data* against the bundled schema and cross-field rules.

    Raises
    ------
    ConfigValidationError
        Listing every problem found.

    """
    validator = Draft202012Validator(_load_schema())
    errors = [
        f"{'.'.join(str(p) for p in err.absolute_path) or '(root)'}: {err.message}"
        for err in sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    ]
    if errors:
        raise ConfigValidationError(errors)

    server_url = data.get("server_url")
    if server_url is not None:
        try:
            canonical_base_url(server_url)
        except InvalidBaseUrlError as exc:
            errors.append(f"server_url: {exc.detail}")

    timeout = data.get("status_wait_timeout")
    interval = data.get("acme_polling_interval", 5)
    if timeout is not None and timeout < interval:
        log.warning(
            "Config warning: status_wait_timeout (%s) is shorter than "
            "acme_polling_interval (%s); waits will poll at most once",
            timeout,
            interval,
        )

    if errors:
        raise ConfigValidationError(errors)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_settings(config_file: str | Path) -> LocalcertSettings:
    """Read, resolve, validate and build settings from *config_file*."""
    path = Path(config_file)
    with path.open(encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            [f"(root): expected a mapping, got {type(data).__name__}"],
        )

    resolve_env_vars(data)
    coerce_scalars(data, _load_schema())
    validate_config(data)
    log.debug("Loaded configuration from %s", path)
    return build_settings(data)
