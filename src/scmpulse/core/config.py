"""
Configuration schema and loading for scmpulse.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _split_entries(value: Any) -> Any:
    """Accept "a,b" or "a\\nb" strings for list fields (env var overrides)."""
    if isinstance(value, str):
        return [entry.strip() for entry in re.split(r"[,\n]", value) if entry.strip()]
    return value


def _validate_patterns(patterns: list[str]) -> list[str]:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid job pattern {pattern!r}: {e}") from e
    return patterns


class JobTagPatternSettings(BaseModel):
    """Tags derived from job names matching a pattern.

    Example YAML:
        global_job_tags:
          - pattern: "(.*?)/(.*)"
            tags: ["team:$1", "service:$2"]
    """

    model_config = {"frozen": True}

    pattern: str = Field(description="Regular expression matched against the full job name")
    tags: list[str] = Field(default_factory=list, description="Tag entries; $1..$n expand to match groups")

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_entries(v)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _validate_patterns([v])[0]


class JobSettings(BaseModel):
    """Telemetry settings for jobs matching a pattern.

    The first entry whose pattern fully matches the job name applies.
    Jobs matching no entry have no configuration and emit nothing.

    Example YAML:
        jobs:
          - pattern: "payments/.*"
            emit_on_checkout: true
            tags: ["team:payments"]
    """

    model_config = {"frozen": True}

    pattern: str = Field(description="Regular expression matched against the full job name")
    emit_on_checkout: bool = Field(default=False, description="Send an event when checkout finishes")
    tags: list[str] = Field(default_factory=list, description="Job-level tag entries (key:value)")

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_entries(v)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _validate_patterns([v])[0]


class SinkSettings(BaseModel):
    """Telemetry sink selection.

    Example YAML:
        sink:
          name: datadog
          options:
            api_key: ${DD_API_KEY}
            site: https://api.datadoghq.eu
    """

    model_config = {"frozen": True}

    name: str = Field(default="console", description="Registered sink name (datadog, dogstatsd, console)")
    options: dict[str, Any] = Field(default_factory=dict, description="Sink-specific options")


class LoggingSettings(BaseModel):
    """Log output of host adapters such as the CLI."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_output: bool = Field(default=False, description="Render log lines as JSON")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class ScmPulseSettings(BaseModel):
    """Top-level scmpulse configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    hostname: str | None = Field(
        default=None,
        description="Host name reported with events; resolved from the environment when unset",
    )
    whitelist: list[str] = Field(
        default_factory=list,
        description="Job patterns to track; empty tracks every job not blacklisted",
    )
    blacklist: list[str] = Field(
        default_factory=list,
        description="Job patterns never tracked, even when whitelisted",
    )
    global_tags: list[str] = Field(
        default_factory=list,
        description="Tag entries (key:value) added to every event",
    )
    global_job_tags: list[JobTagPatternSettings] = Field(
        default_factory=list,
        description="Tags derived from job names by pattern",
    )
    jobs: list[JobSettings] = Field(
        default_factory=list,
        description="Per-job emission settings, first match wins",
    )
    sink: SinkSettings = Field(
        default_factory=SinkSettings,
        description="Where events and counters are sent",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Log output configuration",
    )

    @field_validator("whitelist", "blacklist", "global_tags", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> Any:
        return _split_entries(v)

    @field_validator("whitelist", "blacklist")
    @classmethod
    def validate_job_patterns(cls, v: list[str]) -> list[str]:
        return _validate_patterns(v)


def _expand_reference(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name)
    if value is not None:
        return value
    return default if default is not None else match.group(0)


def _expand_env_vars(value: Any) -> Any:
    """Expand ${VAR} and ${VAR:-default} in every string of a loaded config.

    Unset variables without a default are left as written.
    """
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(_expand_reference, value)
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def load_settings(config_path: Path) -> ScmPulseSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (SCMPULSE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: SCMPULSE_SINK__NAME for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ScmPulseSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SCMPULSE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)

    return ScmPulseSettings(**raw_config)
