"""
Typed runtime settings (``approval_config.settings``).

``Settings`` is the only configuration artifact handed to the rest of the
system.  It is frozen; overrides produce a new instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any

from approval_kernel.exceptions import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the CLI and the invoice pipeline."""

    company_name: str
    departments: tuple[str, ...]
    database_url: str
    database_echo: bool = False
    seed_sample_data: bool = True
    slack_connection_string: str = ""
    email_connection_string: str = ""
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: naming the first invalid setting.
        """
        if not self.company_name or not self.company_name.strip():
            raise ConfigurationError("workflow.company.name", "must not be empty")
        if any(not d for d in self.departments):
            raise ConfigurationError(
                "workflow.company.departments", "department names must not be empty",
            )
        if not self.database_url:
            raise ConfigurationError("database.url", "must not be empty")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                "logging.level", f"{self.log_level!r} is not one of {', '.join(LOG_LEVELS)}",
            )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(", ".join(sorted(unknown)), "unknown setting")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "departments" in changes:
            changes["departments"] = parse_departments(changes["departments"])
        if "log_level" in changes:
            changes["log_level"] = str(changes["log_level"]).upper()
        return replace(self, **changes)


def parse_departments(value: Any) -> tuple[str, ...]:
    """Accept a list or a comma-separated string; blanks are dropped."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ConfigurationError(
            "workflow.company.departments",
            f"expected a list or comma-separated string, got {type(value).__name__}",
        )
    return tuple(item.strip() for item in items if item.strip())
