"""Repository contract shared by every storage backend."""

from __future__ import annotations

from abc import ABC, abstractmethod

from roster.repository.exceptions import MissingValueError, RepositoryErrorCode
from roster.students import Student


class StudentRepository(ABC):
    """Persistence contract for students.

    ``list_all``, ``list_by_major`` and ``count`` only see active students.
    ``find_by_id`` and ``find_by_email`` return inactive students as well, so
    callers can detect and reactivate them. ``delete`` is a soft delete.
    Every returned Student is a copy owned by the caller.
    """

    @abstractmethod
    def create(self, student: Student) -> Student:
        """Persist a new student and return it with its assigned id.

        Raises:
            MissingValueError: If student or one of its required fields is missing
            DuplicateEmailError: If any student, active or not, owns the email
        """

    @abstractmethod
    def find_by_id(self, student_id: int) -> Student | None:
        """Return the student with this id, or None."""

    @abstractmethod
    def find_by_email(self, email: str) -> Student | None:
        """Return the student owning this email (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Student]:
        """Return active students ordered by last name, then first name."""

    @abstractmethod
    def list_by_major(self, major: str) -> list[Student]:
        """Return active students of a major (case-insensitive), same ordering."""

    @abstractmethod
    def update(self, student: Student) -> Student:
        """Replace every field of an existing student except its id.

        Raises:
            MissingValueError: If student or its id is missing
            StudentNotFoundError: If no student has that id
            DuplicateEmailError: If a different student owns the new email
        """

    @abstractmethod
    def delete(self, student_id: int) -> bool:
        """Soft-delete a student. Returns True on success.

        Raises:
            StudentNotFoundError: If no student has that id
        """

    @abstractmethod
    def exists(self, student_id: int) -> bool:
        """Return True if a student (active or not) has this id."""

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        """Return True if a student (active or not) owns this email."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of active students."""

    # --- Argument checks shared by the backends ---

    @staticmethod
    def _require_student(student: Student | None) -> Student:
        if student is None:
            raise MissingValueError(
                "Cannot process a None student", RepositoryErrorCode.NULL_STUDENT
            )
        return student

    @staticmethod
    def _require_id(student_id: int | None) -> int:
        if student_id is None:
            raise MissingValueError("Student id must not be None", RepositoryErrorCode.NULL_ID)
        return student_id

    @staticmethod
    def _require_email(email: str | None) -> str:
        if email is None or not email.strip():
            raise MissingValueError(
                "Email must not be None or blank", RepositoryErrorCode.NULL_EMAIL
            )
        return email.strip().lower()

    @staticmethod
    def _require_major(major: str | None) -> str:
        if major is None or not major.strip():
            raise MissingValueError(
                "Major must not be None or blank", RepositoryErrorCode.NULL_MAJOR
            )
        return major.strip()

    @staticmethod
    def _require_fields(student: Student) -> None:
        required = (
            ("first_name", RepositoryErrorCode.FIRST_NAME_REQUIRED),
            ("last_name", RepositoryErrorCode.LAST_NAME_REQUIRED),
            ("email", RepositoryErrorCode.EMAIL_REQUIRED),
            ("major", RepositoryErrorCode.MAJOR_REQUIRED),
        )
        for field_name, code in required:
            value = getattr(student, field_name, None)
            if value is None or not str(value).strip():
                raise MissingValueError(f"Field '{field_name}' is required", code)

    @staticmethod
    def _sort_key(student: Student) -> tuple[str, str, int]:
        return (student.last_name, student.first_name, student.id or 0)
