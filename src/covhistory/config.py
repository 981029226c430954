"""Configuration loading and management for covhistory.

Configuration sources are merged in priority order:
    1. Defaults (defined in HistoryConfig)
    2. Global config (~/.covhistory.toml)
    3. Project config (./covhistory.toml)
    4. Explicit config file
    5. Environment variables (COVHISTORY_* prefix)
    6. Overrides (passed as kwargs, typically from CLI flags)

Example:
    >>> config = load_config(retention_days=30)
    >>> config.retention_days
    30
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

ENV_PREFIX = "COVHISTORY_"


@dataclass(frozen=True)
class HistoryConfig:
    """Configuration for the coverage history tracker.

    Instances are immutable: a Tracker receives one at construction and
    every call reads the same values.

    Attributes:
        storage_path: Directory holding one JSON file per entry
        retention_days: Entries older than this are dropped by cleanup
        max_entries: Cleanup keeps at most this many entries (newest first)
        auto_cleanup: When False, cleanup is a no-op
        metrics_enabled: Informational flag recorded for consumers
    """

    storage_path: str = ".github/coverage/history"
    retention_days: int = 90
    max_entries: int = 1000
    auto_cleanup: bool = True
    metrics_enabled: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.storage_path:
            raise ValueError("storage_path must not be empty")

        if self.auto_cleanup:
            if self.retention_days <= 0:
                raise ValueError("retention_days must be positive when auto_cleanup is enabled")
            if self.max_entries <= 0:
                raise ValueError("max_entries must be positive when auto_cleanup is enabled")

    @property
    def storage_dir(self) -> Path:
        """Storage directory as a Path."""
        return Path(self.storage_path)


DEFAULT_CONFIG = HistoryConfig()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> HistoryConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides; ``None`` values are ignored so CLI
            options that were not given do not mask file settings

    Returns:
        Validated HistoryConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation or a key is unknown
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".covhistory.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "covhistory.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(HistoryConfig)}
    for key in merged:
        if key not in known:
            raise InvalidConfigError(key, merged[key], "unknown configuration key")

    try:
        return HistoryConfig(**merged)
    except ValueError as e:
        key = str(e).split(" ", 1)[0]
        raise InvalidConfigError(key, merged.get(key), str(e)) from e


def _read_config_file(path: Path, label: str) -> dict[str, Any]:
    """Read one TOML file, flattening an optional ``[history]`` table."""
    try:
        raw = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}") from e

    section = raw.pop("history", None)
    if isinstance(section, dict):
        raw.update(section)
    return raw


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from COVHISTORY_* environment variables.

    Supported environment variables:
        COVHISTORY_STORAGE_PATH: str
        COVHISTORY_RETENTION_DAYS: int
        COVHISTORY_MAX_ENTRIES: int
        COVHISTORY_AUTO_CLEANUP: bool (true/false/1/0)
        COVHISTORY_METRICS_ENABLED: bool

    Returns:
        Dict of field_name -> parsed_value for any COVHISTORY_* vars found.
    """
    type_hints = get_type_hints(HistoryConfig)

    result: dict[str, Any] = {}

    for field_name in HistoryConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            result[field_name] = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e)) from e

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the field's type."""
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    return value


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
