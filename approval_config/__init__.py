"""
approval_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_settings()`` is the only way the CLI obtains configuration.  It
    layers the built-in ``defaults.yaml``, an optional user YAML file and
    the environment; command-line flags are applied afterwards with
    ``Settings.with_overrides``.

Failure modes:
    - ``ConfigurationError`` -- missing or malformed file, invalid value.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from approval_config.loader import (
    CONFIG_FILE_ENV,
    DEFAULTS_PATH,
    apply_environment,
    load_yaml_file,
    merge,
    settings_from_mapping,
)
from approval_config.settings import Settings
from approval_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = ["Settings", "get_settings"]


def get_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve settings from defaults, a user YAML file and the environment.

    Args:
        config_path: User YAML file.  Falls back to ``$APPROVAL_CONFIG_FILE``.
        environ: Environment mapping; ``os.environ`` when omitted.
    """
    env = os.environ if environ is None else environ
    data = load_yaml_file(DEFAULTS_PATH)

    user_path = config_path or env.get(CONFIG_FILE_ENV)
    if user_path:
        data = merge(data, load_yaml_file(Path(user_path)))

    settings = settings_from_mapping(apply_environment(data, env))
    _logger.debug(
        "settings_resolved",
        extra={
            "config_file": str(user_path) if user_path else None,
            "company": settings.company_name,
            "database_dialect": settings.database_url.split(":", 1)[0],
        },
    )
    return settings
