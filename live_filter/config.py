"""Configuration management for live-filter."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from live_filter.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from live_filter.filters.params import DEFAULT_PARAM_KEY
from live_filter.utils.fileops import secure_atomic_write

SQL_DIALECTS: tuple[str, ...] = ("sqlite", "postgresql", "mysql")
DEFAULT_DIALECT = "postgresql"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "live-filter" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        colored_output: Whether to use colored terminal output.
        sql_dialect: Dialect the ``sql`` command compiles for.
        param_key: Name of the query parameter holding the filters.
        search_fields: Columns the virtual ``_search`` field expands to.
        config_path: Path where config was loaded from (None if defaults).
    """

    colored_output: bool = True
    sql_dialect: str = DEFAULT_DIALECT
    param_key: str = DEFAULT_PARAM_KEY
    search_fields: list[str] = field(default_factory=list)
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.sql_dialect not in SQL_DIALECTS:
            raise ConfigValidationError(
                "sql.dialect",
                self.sql_dialect,
                f"must be one of: {', '.join(SQL_DIALECTS)}",
            )

        if not self.param_key:
            raise ConfigValidationError("url.param_key", self.param_key, "must not be empty")

        if self.sql_dialect != "postgresql":
            warnings.append(
                f"sql.dialect={self.sql_dialect}: array operators "
                f"(contains_any, contains_all) only compile for postgresql"
            )

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: live-filter init-config"
        )
        return config, warnings + config.validate()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    return config, warnings + config.validate()


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    # Parse [sql] section
    sql = data.get("sql", {})
    if "dialect" in sql:
        value = sql["dialect"]
        if not isinstance(value, str):
            raise ConfigValidationError("sql.dialect", value, "must be a string")
        config.sql_dialect = value.lower()

    # Parse [url] section
    url = data.get("url", {})
    if "param_key" in url:
        value = url["param_key"]
        if not isinstance(value, str):
            raise ConfigValidationError("url.param_key", value, "must be a string")
        config.param_key = value

    # Parse [search] section
    search = data.get("search", {})
    if "fields" in search:
        value = search["fields"]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigValidationError("search.fields", value, "must be a list of strings")
        config.search_fields = list(value)

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    data: dict[str, Any] = {
        "display": {
            "colored_output": config.colored_output,
        },
        "sql": {
            "dialect": config.sql_dialect,
        },
    }

    if config.param_key != DEFAULT_PARAM_KEY:
        data["url"] = {"param_key": config.param_key}

    if config.search_fields:
        data["search"] = {"fields": list(config.search_fields)}

    secure_atomic_write(config_path, tomli_w.dumps(data))
