"""
Configuration Loader (``approval_config.loader``).

Responsibility
--------------
Reads the YAML layers, merges them, applies environment variables and
turns the result into a ``Settings`` instance.

Invariants enforced
-------------------
* Later layers only replace the keys they name; nested mappings merge.
* Every parse problem raises ``ConfigurationError`` naming the setting.

Failure modes
-------------
* Missing user YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` wrapping ``yaml.YAMLError``.
* Non-boolean ``database.echo`` / ``database.seed_sample_data``
  -> ``ConfigurationError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from approval_config.settings import Settings, parse_departments
from approval_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_FILE_ENV = "APPROVAL_CONFIG_FILE"

# environment variable -> dotted YAML path
ENV_VARS: dict[str, str] = {
    "COMPANY_NAME": "workflow.company.name",
    "COMPANY_DEPARTMENTS": "workflow.company.departments",
    "DATABASE_URL": "database.url",
    "SLACK_CONNECTION_STRING": "notifications.slack.connection_string",
    "EMAIL_CONNECTION_STRING": "notifications.email.connection_string",
    "LOG_LEVEL": "logging.level",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping from ``path``.

    Raises:
        ConfigurationError: if the file is missing, unreadable, malformed or
            does not hold a mapping.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(str(path), "configuration file not found") from None
    except yaml.YAMLError as exc:
        raise ConfigurationError(str(path), f"invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_environment(data: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay the known environment variables that are set and non-empty."""
    result = dict(data)
    for var, dotted in ENV_VARS.items():
        value = environ.get(var)
        if value:
            result = merge(result, _nest(dotted, value))
    return result


def _nest(dotted: str, value: Any) -> dict[str, Any]:
    node: Any = value
    for part in reversed(dotted.split(".")):
        node = {part: node}
    return node


def _get(data: Mapping[str, Any], dotted: str, default: Any = None) -> Any:
    node: Any = data
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def _as_bool(dotted: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "0", "off"):
        return False
    raise ConfigurationError(dotted, f"expected a boolean, got {value!r}")


def settings_from_mapping(data: Mapping[str, Any]) -> Settings:
    """Build ``Settings`` from a merged configuration mapping."""
    return Settings(
        company_name=str(_get(data, "workflow.company.name", "")).strip(),
        departments=parse_departments(_get(data, "workflow.company.departments", ())),
        database_url=str(_get(data, "database.url", "")).strip(),
        database_echo=_as_bool("database.echo", _get(data, "database.echo", False)),
        seed_sample_data=_as_bool(
            "database.seed_sample_data", _get(data, "database.seed_sample_data", True),
        ),
        slack_connection_string=str(
            _get(data, "notifications.slack.connection_string", "") or ""
        ),
        email_connection_string=str(
            _get(data, "notifications.email.connection_string", "") or ""
        ),
        log_level=str(_get(data, "logging.level", "WARNING")).upper(),
    )
