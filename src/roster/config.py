"""Configuration loading for Roster.

Settings come from an optional ``roster.yaml`` file and are then overridden by
environment variables::

    repository:
      backend: sql            # "memory" or "sql"
      database_url: roster.db # path, ":memory:" or SQLAlchemy URL
    logging:
      level: INFO
      dir: logs
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

BACKEND_MEMORY = "memory"
BACKEND_SQL = "sql"
SUPPORTED_BACKENDS = (BACKEND_MEMORY, BACKEND_SQL)

ENV_OVERRIDES = {
    "ROSTER_BACKEND": "backend",
    "ROSTER_DATABASE_URL": "database_url",
    "ROSTER_LOG_LEVEL": "log_level",
    "ROSTER_LOG_DIR": "log_dir",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class RosterConfig:
    """Runtime configuration.

    Attributes:
        backend: Storage engine to use, "memory" or "sql".
        database_url: Database location for the "sql" backend.
        log_level: Log level name.
        log_dir: Directory for the rotating log file.
    """

    backend: str = BACKEND_MEMORY
    database_url: str = "roster.db"
    log_level: str = "INFO"
    log_dir: str = "logs"

    def __post_init__(self) -> None:
        self.backend = str(self.backend).strip().lower()
        if self.backend not in SUPPORTED_BACKENDS:
            raise ConfigError(
                f"Unsupported backend '{self.backend}', "
                f"expected one of: {', '.join(SUPPORTED_BACKENDS)}"
            )
        if not str(self.database_url).strip():
            raise ConfigError("database_url must not be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RosterConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a section has the wrong shape or a value is invalid.
        """
        repository = data.get("repository") or {}
        logging_data = data.get("logging") or {}
        for section_name, section in (("repository", repository), ("logging", logging_data)):
            if not isinstance(section, dict):
                raise ConfigError(f"Section '{section_name}' must be a mapping")

        defaults = cls.__dataclass_fields__
        return cls(
            backend=repository.get("backend", defaults["backend"].default),
            database_url=str(repository.get("database_url", defaults["database_url"].default)),
            log_level=str(logging_data.get("level", defaults["log_level"].default)),
            log_dir=str(logging_data.get("dir", defaults["log_dir"].default)),
        )

    def with_env_overrides(self, environ: Mapping[str, str] | None = None) -> RosterConfig:
        """Return a copy with ROSTER_* environment variables applied."""
        environ = os.environ if environ is None else environ
        values = {
            "backend": self.backend,
            "database_url": self.database_url,
            "log_level": self.log_level,
            "log_dir": self.log_dir,
        }
        for env_name, field_name in ENV_OVERRIDES.items():
            if environ.get(env_name):
                values[field_name] = environ[env_name]
        return RosterConfig(**values)


def load_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RosterConfig:
    """Load Roster configuration.

    Args:
        config_path: Path to a YAML file. When None, defaults are used.
        environ: Environment mapping for overrides. Defaults to os.environ.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file doesn't exist or is invalid.
    """
    if config_path is None:
        return RosterConfig().with_env_overrides(environ)

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return RosterConfig.from_dict(data).with_env_overrides(environ)
