"""Student entity with field-level validation."""

from __future__ import annotations

from datetime import date
from typing import Any

from roster.students.exceptions import InvalidStudentFieldError


def is_valid_email(email: str | None) -> bool:
    """Check the structural validity of an email address.

    The address must hold exactly one ``@`` with a non-empty local part and a
    domain that contains a dot which is neither its first nor its last
    character. The whole address may not start or end with ``@`` or ``.``.
    """
    if not isinstance(email, str):
        return False
    email = email.strip()
    if not email or email.count("@") != 1:
        return False
    if email[0] in "@." or email[-1] in "@.":
        return False

    local, domain = email.split("@")
    if not local or not domain:
        return False

    # The last dot must sit inside the domain, with at least one char before it
    at_index = email.index("@")
    last_dot = email.rindex(".") if "." in email else -1
    if at_index >= last_dot - 1:
        return False

    return "." in domain and not domain.startswith(".") and not domain.endswith(".")


def _require_text(field: str, value: str | None, label: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidStudentFieldError(field, f"{label} must not be empty")
    return str(value).strip()


class Student:
    """A student record.

    Every setter validates its value immediately and raises
    InvalidStudentFieldError on bad input. The constructor goes through the
    same setters, so an invalid Student can never be built.
    """

    def __init__(
        self,
        first_name: str,
        last_name: str,
        email: str,
        major: str,
        enrollment_date: date | None = None,
        id: int | None = None,
        active: bool = True,
    ) -> None:
        self._id: int | None = id
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.major = major
        self.enrollment_date = enrollment_date if enrollment_date is not None else date.today()
        self.active = active

    @property
    def id(self) -> int | None:
        return self._id

    def assign_id(self, student_id: int) -> None:
        """Set the identity once. Re-assigning a different id is refused."""
        if student_id is None:
            raise InvalidStudentFieldError("id", "id must not be None")
        if self._id is not None and self._id != student_id:
            raise InvalidStudentFieldError(
                "id", f"Student already has id {self._id}, cannot reassign to {student_id}"
            )
        self._id = student_id

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, value: str) -> None:
        self._first_name = _require_text("first_name", value, "First name")

    @property
    def last_name(self) -> str:
        return self._last_name

    @last_name.setter
    def last_name(self, value: str) -> None:
        self._last_name = _require_text("last_name", value, "Last name")

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: str) -> None:
        if not is_valid_email(value):
            raise InvalidStudentFieldError("email", f"Email {value!r} is not a valid address")
        self._email = value.strip().lower()

    @property
    def major(self) -> str:
        return self._major

    @major.setter
    def major(self, value: str) -> None:
        self._major = _require_text("major", value, "Major")

    @property
    def enrollment_date(self) -> date:
        return self._enrollment_date

    @enrollment_date.setter
    def enrollment_date(self, value: date) -> None:
        if value is None:
            raise InvalidStudentFieldError("enrollment_date", "Enrollment date must not be None")
        if value > date.today():
            raise InvalidStudentFieldError(
                "enrollment_date", f"Enrollment date {value.isoformat()} is in the future"
            )
        self._enrollment_date = value

    @property
    def active(self) -> bool:
        return self._active

    @active.setter
    def active(self, value: bool) -> None:
        self._active = bool(value)

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False

    def copy(self, with_id: bool = True) -> Student:
        """Return an independent value copy of this student.

        Args:
            with_id: Whether the copy keeps this student's id.
        """
        return Student(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            major=self.major,
            enrollment_date=self.enrollment_date,
            id=self.id if with_id else None,
            active=self.active,
        )

    def _key(self) -> tuple[Any, ...]:
        return (
            self.id,
            self.first_name,
            self.last_name,
            self.email,
            self.major,
            self.enrollment_date,
            self.active,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Student):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id!r}, name={self.full_name!r}, email={self.email!r}, "
            f"major={self.major!r}, active={self.active!r})>"
        )
