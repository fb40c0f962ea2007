"""Service - business rules and transfer models for students."""

from roster.service.exceptions import (
    BusinessRuleError,
    DataAccessError,
    ErrorKind,
    ServiceError,
    ServiceErrorCode,
    ServiceValidationError,
    UnexpectedServiceError,
)
from roster.service.models import (
    StudentDTO,
    StudentStatistics,
    dto_to_student,
    student_to_dto,
)
from roster.service.service import StudentService

__all__ = [
    "BusinessRuleError",
    "DataAccessError",
    "ErrorKind",
    "ServiceError",
    "ServiceErrorCode",
    "ServiceValidationError",
    "StudentDTO",
    "StudentService",
    "StudentStatistics",
    "UnexpectedServiceError",
    "dto_to_student",
    "student_to_dto",
]
