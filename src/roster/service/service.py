"""StudentService - business rules on top of a StudentRepository."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from roster.logging import get_logger, mask_email
from roster.repository import (
    DuplicateEmailError,
    RepositoryError,
    StudentNotFoundError,
    StudentRepository,
)
from roster.service.exceptions import (
    BusinessRuleError,
    DataAccessError,
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
from roster.students import InvalidStudentFieldError

logger = get_logger("service")


class StudentService:
    """Main API for student operations.

    Validates input, applies the rules that span several repository calls
    and converts between StudentDTO and the Student entity. Every failure
    surfaces as a ServiceError subclass carrying a kind and a code.
    """

    def __init__(self, repository: StudentRepository) -> None:
        """Initialize the service.

        Args:
            repository: Storage backend to delegate to.
        """
        if repository is None:
            raise ValueError("A repository is required")
        self._repository = repository

    # --- Commands ---

    def register(self, dto: StudentDTO) -> StudentDTO:
        """Register a new student.

        Args:
            dto: Student data; ``id`` is ignored and ``active`` forced to True.

        Returns:
            The stored student, with its assigned id.

        Raises:
            ServiceValidationError: If dto is None or invalid
            BusinessRuleError: EMAIL_DUPLICADO if the email is taken
            DataAccessError: If the repository fails
        """
        self._require_dto(dto)
        self._require_valid(dto)

        with self._repository_call(ServiceErrorCode.REGISTER_ERROR, "registering the student"):
            if self._repository.exists_by_email(dto.email):  # type: ignore[arg-type]
                raise BusinessRuleError(
                    "A student with this email already exists",
                    ServiceErrorCode.DUPLICATE_EMAIL,
                )
            student = dto_to_student(dto, with_id=False)
            student.activate()
            created = self._repository.create(student)

        logger.info("Registered student id=%s email=%s", created.id, mask_email(created.email))
        return student_to_dto(created)

    def update(self, dto: StudentDTO) -> StudentDTO:
        """Replace the data of an existing student.

        Raises:
            ServiceValidationError: If dto or its id is None, or dto is invalid
            BusinessRuleError: ESTUDIANTE_NO_ENCONTRADO or EMAIL_DUPLICADO
            DataAccessError: If the repository fails
        """
        self._require_dto(dto)
        self._require_id(dto.id)
        self._require_valid(dto)

        with self._repository_call(ServiceErrorCode.UPDATE_ERROR, "updating the student"):
            if not self._repository.exists(dto.id):  # type: ignore[arg-type]
                raise self._not_found(dto.id)
            if not self._email_free(dto.email, dto.id):  # type: ignore[arg-type]
                raise BusinessRuleError(
                    "Another student already uses this email",
                    ServiceErrorCode.DUPLICATE_EMAIL,
                )
            updated = self._repository.update(dto_to_student(dto))

        logger.info("Updated student id=%s", updated.id)
        return student_to_dto(updated)

    def delete(self, student_id: int) -> bool:
        """Soft-delete a student.

        Raises:
            ServiceValidationError: If student_id is None
            BusinessRuleError: ESTUDIANTE_NO_ENCONTRADO
            DataAccessError: If the repository fails
        """
        self._require_id(student_id)

        with self._repository_call(ServiceErrorCode.DELETE_ERROR, "deleting the student"):
            if not self._repository.exists(student_id):
                raise self._not_found(student_id)
            deleted = self._repository.delete(student_id)

        logger.info("Deactivated student id=%s", student_id)
        return deleted

    def reactivate(self, student_id: int) -> StudentDTO:
        """Mark a soft-deleted student as active again."""
        self._require_id(student_id)

        with self._repository_call(ServiceErrorCode.REACTIVATE_ERROR, "reactivating the student"):
            student = self._repository.find_by_id(student_id)
            if student is None:
                raise self._not_found(student_id)
            student.activate()
            reactivated = self._repository.update(student)

        logger.info("Reactivated student id=%s", student_id)
        return student_to_dto(reactivated)

    # --- Queries ---

    def find_by_id(self, student_id: int) -> StudentDTO | None:
        self._require_id(student_id)
        with self._repository_call(ServiceErrorCode.FIND_ERROR, "finding the student"):
            student = self._repository.find_by_id(student_id)
        return student_to_dto(student) if student is not None else None

    def find_by_email(self, email: str) -> StudentDTO | None:
        self._require_email(email)
        with self._repository_call(
            ServiceErrorCode.FIND_BY_EMAIL_ERROR, "finding the student by email"
        ):
            student = self._repository.find_by_email(email)
        return student_to_dto(student) if student is not None else None

    def list_active(self) -> list[StudentDTO]:
        with self._repository_call(ServiceErrorCode.LIST_ERROR, "listing students"):
            students = self._repository.list_all()
        return [student_to_dto(s) for s in students]

    def list_by_major(self, major: str) -> list[StudentDTO]:
        if major is None or not major.strip():
            raise ServiceValidationError("Major is required", ServiceErrorCode.EMPTY_MAJOR)
        with self._repository_call(
            ServiceErrorCode.LIST_BY_MAJOR_ERROR, "listing students by major"
        ):
            students = self._repository.list_by_major(major)
        return [student_to_dto(s) for s in students]

    def count_active(self) -> int:
        with self._repository_call(ServiceErrorCode.COUNT_ERROR, "counting students"):
            return self._repository.count()

    def statistics(self) -> StudentStatistics:
        """Aggregate active students, read fresh from the repository.

        Both figures come from a single ``list_all()`` snapshot, so the total
        always equals the sum of the per-major counts.

        Returns:
            StudentStatistics with the active total and a per-major breakdown
        """
        with self._repository_call(ServiceErrorCode.STATISTICS_ERROR, "building statistics"):
            students = self._repository.list_all()

        return StudentStatistics(
            total_active=len(students),
            generated_at=datetime.now(UTC),
            by_major=dict(Counter(s.major for s in students)),
        )

    def validate_email_unique(self, email: str, exclude_id: int | None = None) -> bool:
        """Return True if nobody owns ``email`` or its only owner is ``exclude_id``."""
        self._require_email(email)
        with self._repository_call(ServiceErrorCode.EMAIL_CHECK_ERROR, "checking the email"):
            return self._email_free(email, exclude_id)

    # --- Internals ---

    def _email_free(self, email: str, exclude_id: int | None) -> bool:
        owner = self._repository.find_by_email(email)
        return owner is None or owner.id == exclude_id

    @staticmethod
    def _not_found(student_id: int | None) -> BusinessRuleError:
        return BusinessRuleError(
            f"Student with id '{student_id}' not found", ServiceErrorCode.STUDENT_NOT_FOUND
        )

    @staticmethod
    def _require_dto(dto: StudentDTO | None) -> None:
        if dto is None:
            raise ServiceValidationError("Student data is required", ServiceErrorCode.NULL_DTO)

    @staticmethod
    def _require_id(student_id: int | None) -> None:
        if student_id is None:
            raise ServiceValidationError("Student id is required", ServiceErrorCode.NULL_ID)

    @staticmethod
    def _require_email(email: str | None) -> None:
        if email is None or not email.strip():
            raise ServiceValidationError("Email is required", ServiceErrorCode.EMPTY_EMAIL)

    @staticmethod
    def _require_valid(dto: StudentDTO) -> None:
        if not dto.is_valid():
            raise ServiceValidationError(
                "Student data is not valid", ServiceErrorCode.INVALID_DATA
            )

    @contextmanager
    def _repository_call(self, code: ServiceErrorCode, action: str) -> Iterator[None]:
        """Translate lower-layer failures into ServiceError subclasses."""
        try:
            yield
        except ServiceError:
            raise
        except DuplicateEmailError as e:
            raise BusinessRuleError(
                "A student with this email already exists",
                ServiceErrorCode.DUPLICATE_EMAIL,
                cause=e,
            ) from e
        except StudentNotFoundError as e:
            raise BusinessRuleError(
                e.args[0], ServiceErrorCode.STUDENT_NOT_FOUND, cause=e
            ) from e
        except RepositoryError as e:
            logger.error("Repository failure while %s: %s", action, e)
            raise DataAccessError(f"Error while {action}: {e}", code, cause=e) from e
        except InvalidStudentFieldError as e:
            raise ServiceValidationError(
                f"Invalid {e.field}: {e}", ServiceErrorCode.INVALID_DATA, cause=e
            ) from e
        except Exception as e:
            logger.exception("Unexpected failure while %s", action)
            raise UnexpectedServiceError(
                f"Unexpected error while {action}: {e}", ServiceErrorCode.SYSTEM_ERROR, cause=e
            ) from e
