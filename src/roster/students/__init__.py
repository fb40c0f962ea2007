"""Students - the Student entity and its validation rules."""

from roster.students.exceptions import InvalidStudentFieldError
from roster.students.models import Student, is_valid_email

__all__ = [
    "InvalidStudentFieldError",
    "Student",
    "is_valid_email",
]
