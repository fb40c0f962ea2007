"""Transfer and reporting models for the student service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from roster.students import Student, is_valid_email


class StudentDTO(BaseModel):
    """Service-facing view of a student.

    Every field accepts None. ``is_valid()`` reports whether the DTO satisfies
    the entity rules; the service turns a False into a validation error.
    """

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    major: str | None = None
    enrollment_date: date | None = Field(default_factory=date.today)
    active: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """First and last name joined by a space, empty if either is missing."""
        if self.first_name is None or self.last_name is None:
            return ""
        return f"{self.first_name} {self.last_name}"

    def is_valid(self) -> bool:
        """Apply the entity's field rules without building an entity."""
        for text in (self.first_name, self.last_name, self.major):
            if text is None or not text.strip():
                return False
        if not is_valid_email(self.email):
            return False
        return self.enrollment_date is None or self.enrollment_date <= date.today()


def student_to_dto(student: Student) -> StudentDTO:
    """Convert a Student entity to a StudentDTO."""
    return StudentDTO.model_validate(student)


def dto_to_student(dto: StudentDTO, with_id: bool = True) -> Student:
    """Convert a StudentDTO to a Student entity.

    Raises:
        InvalidStudentFieldError: If any field breaks the entity rules
    """
    return Student(
        first_name=dto.first_name,  # type: ignore[arg-type]
        last_name=dto.last_name,  # type: ignore[arg-type]
        email=dto.email,  # type: ignore[arg-type]
        major=dto.major,  # type: ignore[arg-type]
        enrollment_date=dto.enrollment_date,
        id=dto.id if with_id else None,
        active=dto.active,
    )


@dataclass
class StudentStatistics:
    """Aggregated figures over active students."""

    total_active: int
    generated_at: datetime
    by_major: dict[str, int] = field(default_factory=dict)
