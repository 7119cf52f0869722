# src/keepsake/core/config.py
"""
Configuration schema and loading for keepsake.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

# Used when neither the CLI nor a settings file says otherwise
DEFAULT_RELEASES_TO_KEEP = 3


class RetentionSettings(BaseModel):
    """Retention policy configuration.

    Example YAML:
        retention:
          releases_to_keep: 5
    """

    model_config = {"frozen": True, "extra": "forbid"}

    releases_to_keep: int = Field(
        default=DEFAULT_RELEASES_TO_KEEP,
        gt=0,
        description="Most recently deployed distinct releases to keep per (project, environment)",
    )


class HistorySettings(BaseModel):
    """Where the deployment history document lives."""

    model_config = {"frozen": True, "extra": "forbid"}

    path: Path | None = Field(
        default=None,
        description="YAML or JSON file with projects, environments, releases and deployments",
    )


class KeepsakeSettings(BaseModel):
    """Top-level keepsake configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    retention: RetentionSettings = Field(
        default_factory=RetentionSettings,
        description="Retention policy configuration",
    )
    history: HistorySettings = Field(
        default_factory=HistorySettings,
        description="Deployment history input",
    )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # Unresolved: leave as-is so validation reports the raw value
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    """Lowercase mapping keys at every depth.

    Dynaconf uppercases top-level keys and keeps env-var supplied nested
    keys in upper case; the Pydantic schema is all lower case.
    """
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> KeepsakeSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (KEEPSAKE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: KEEPSAKE_RETENTION__RELEASES_TO_KEEP for
    nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated KeepsakeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="KEEPSAKE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_keys(raw_config)

    raw_config = _expand_env_vars(raw_config)

    return KeepsakeSettings(**raw_config)


def resolve_config(settings: KeepsakeSettings) -> dict[str, Any]:
    """Convert validated settings to a JSON-safe dict (explicit + defaults)."""
    return settings.model_dump(mode="json")
