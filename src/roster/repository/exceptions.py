"""Custom exceptions for the student repositories."""

from __future__ import annotations

from enum import StrEnum


class RepositoryErrorCode(StrEnum):
    """Stable, machine-readable repository error codes."""

    GENERIC = "REPO_ERROR"
    NULL_STUDENT = "ESTUDIANTE_NULO"
    NULL_ID = "ID_NULO"
    NULL_EMAIL = "EMAIL_NULO"
    NULL_MAJOR = "CARRERA_NULA"
    FIRST_NAME_REQUIRED = "NOMBRE_REQUERIDO"
    LAST_NAME_REQUIRED = "APELLIDO_REQUERIDO"
    EMAIL_REQUIRED = "EMAIL_REQUERIDO"
    MAJOR_REQUIRED = "CARRERA_REQUERIDA"
    DUPLICATE_EMAIL = "EMAIL_DUPLICADO"
    STUDENT_NOT_FOUND = "ESTUDIANTE_NO_ENCONTRADO"
    SQL_ERROR = "SQL_ERROR"
    SCHEMA_INIT_ERROR = "INIT_BD_ERROR"


class RepositoryError(Exception):
    """Base exception for repository errors.

    Attributes:
        code: Stable error code callers can branch on.
        cause: The low-level exception that triggered this one, if any.
    """

    default_code = RepositoryErrorCode.GENERIC

    def __init__(
        self,
        message: str,
        code: RepositoryErrorCode | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.code}] {self.args[0]}"


class MissingValueError(RepositoryError):
    """A required argument or field was None or blank."""


class DuplicateEmailError(RepositoryError):
    """Another student already owns this email."""

    default_code = RepositoryErrorCode.DUPLICATE_EMAIL


class StudentNotFoundError(RepositoryError):
    """Student with given ID does not exist."""

    default_code = RepositoryErrorCode.STUDENT_NOT_FOUND
