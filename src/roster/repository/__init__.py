"""Repository - storage backends for students behind one contract."""

from roster.repository.base import StudentRepository
from roster.repository.database import Database
from roster.repository.exceptions import (
    DuplicateEmailError,
    MissingValueError,
    RepositoryError,
    RepositoryErrorCode,
    StudentNotFoundError,
)
from roster.repository.factory import create_repository
from roster.repository.memory import InMemoryStudentRepository, StoreStats
from roster.repository.models import StudentRecord
from roster.repository.sql import SqlStudentRepository

__all__ = [
    "Database",
    "DuplicateEmailError",
    "InMemoryStudentRepository",
    "MissingValueError",
    "RepositoryError",
    "RepositoryErrorCode",
    "SqlStudentRepository",
    "StoreStats",
    "StudentNotFoundError",
    "StudentRecord",
    "StudentRepository",
    "create_repository",
]
