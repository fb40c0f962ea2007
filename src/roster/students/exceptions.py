"""Custom exceptions for the Student entity."""


class InvalidStudentFieldError(ValueError):
    """A Student field was assigned a malformed value."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
