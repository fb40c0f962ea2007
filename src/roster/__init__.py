"""Roster - student registry with swappable storage backends."""

from __future__ import annotations

from roster.config import RosterConfig, load_config
from roster.logging import setup_logging
from roster.repository import create_repository
from roster.service import StudentService

__version__ = "0.1.0"


def create_service(config: RosterConfig | None = None) -> StudentService:
    """Build a StudentService on the backend selected by configuration.

    Logging is set up from ``config.log_dir`` and ``config.log_level`` first.

    Args:
        config: Runtime configuration. Loaded from the environment when None.

    Returns:
        A StudentService wired to the configured repository.
    """
    if config is None:
        config = load_config()
    setup_logging(log_dir=config.log_dir, level=config.log_level)
    return StudentService(create_repository(config))


__all__ = ["create_service"]
