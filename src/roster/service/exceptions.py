"""Custom exceptions for the student service."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Category of a service failure."""

    VALIDATION = "validation"
    BUSINESS = "business"
    DATA = "data"
    SYSTEM = "system"


class ServiceErrorCode(StrEnum):
    """Stable, machine-readable service error codes."""

    GENERIC = "SERVICIO_ERROR"
    SYSTEM_ERROR = "ERROR_SISTEMA"
    # Validation
    NULL_DTO = "DTO_NULO"
    NULL_ID = "ID_NULO"
    EMPTY_EMAIL = "EMAIL_VACIO"
    EMPTY_MAJOR = "CARRERA_VACIA"
    INVALID_DATA = "DATOS_INVALIDOS"
    # Business rules
    DUPLICATE_EMAIL = "EMAIL_DUPLICADO"
    STUDENT_NOT_FOUND = "ESTUDIANTE_NO_ENCONTRADO"
    # Data access, one per operation
    REGISTER_ERROR = "REGISTRO_ERROR"
    FIND_ERROR = "BUSQUEDA_ERROR"
    FIND_BY_EMAIL_ERROR = "BUSQUEDA_EMAIL_ERROR"
    LIST_ERROR = "LISTADO_ERROR"
    LIST_BY_MAJOR_ERROR = "LISTADO_CARRERA_ERROR"
    UPDATE_ERROR = "ACTUALIZACION_ERROR"
    DELETE_ERROR = "ELIMINACION_ERROR"
    REACTIVATE_ERROR = "REACTIVACION_ERROR"
    STATISTICS_ERROR = "ESTADISTICAS_ERROR"
    EMAIL_CHECK_ERROR = "VALIDACION_EMAIL_ERROR"
    COUNT_ERROR = "CONTEO_ERROR"


class ServiceError(Exception):
    """Base exception for service errors.

    Attributes:
        code: Stable error code.
        kind: Validation, business, data or system.
        cause: The exception this one wraps, if any.
    """

    kind = ErrorKind.SYSTEM

    def __init__(
        self,
        message: str,
        code: ServiceErrorCode = ServiceErrorCode.GENERIC,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause

    @property
    def is_validation_error(self) -> bool:
        return self.kind == ErrorKind.VALIDATION

    @property
    def is_business_error(self) -> bool:
        return self.kind == ErrorKind.BUSINESS

    @property
    def is_data_error(self) -> bool:
        return self.kind == ErrorKind.DATA

    @property
    def is_system_error(self) -> bool:
        return self.kind == ErrorKind.SYSTEM

    def __str__(self) -> str:
        return f"[{self.kind}/{self.code}] {self.message}"


class ServiceValidationError(ServiceError):
    """Input was missing or malformed."""

    kind = ErrorKind.VALIDATION


class BusinessRuleError(ServiceError):
    """A business rule was violated (duplicate email, unknown student)."""

    kind = ErrorKind.BUSINESS


class DataAccessError(ServiceError):
    """The repository failed."""

    kind = ErrorKind.DATA


class UnexpectedServiceError(ServiceError):
    """Anything the other categories don't cover."""

    kind = ErrorKind.SYSTEM
