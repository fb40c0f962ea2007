"""Build the repository backend named by configuration."""

from __future__ import annotations

from roster.config import BACKEND_MEMORY, BACKEND_SQL, ConfigError, RosterConfig
from roster.logging import get_logger
from roster.repository.base import StudentRepository
from roster.repository.memory import InMemoryStudentRepository
from roster.repository.sql import SqlStudentRepository

logger = get_logger("repository")


def create_repository(config: RosterConfig) -> StudentRepository:
    """Instantiate the configured backend.

    Args:
        config: Runtime configuration.

    Returns:
        A ready-to-use repository.

    Raises:
        ConfigError: If the backend name is unknown.
    """
    if config.backend == BACKEND_MEMORY:
        logger.info("Using in-memory student repository")
        return InMemoryStudentRepository()
    if config.backend == BACKEND_SQL:
        logger.info("Using SQL student repository")
        return SqlStudentRepository(config.database_url)
    raise ConfigError(f"Unsupported backend '{config.backend}'")
