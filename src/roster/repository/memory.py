"""In-memory student repository."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field

from roster.logging import get_logger, mask_email
from roster.repository.base import StudentRepository
from roster.repository.exceptions import DuplicateEmailError, StudentNotFoundError
from roster.students import Student

logger = get_logger("repository.memory")


@dataclass
class StoreStats:
    """Snapshot of the in-memory store."""

    total: int
    active: int
    inactive: int
    next_id: int
    by_major: dict[str, int] = field(default_factory=dict)


class InMemoryStudentRepository(StudentRepository):
    """Thread-safe repository backed by a dict keyed by id.

    One re-entrant lock guards the dict and the id counter, so a uniqueness
    check and the write that follows it form a single critical section.
    Students go in and come out as copies.
    """

    def __init__(self) -> None:
        self._students: dict[int, Student] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, student: Student) -> Student:
        """Store a copy of ``student`` under the next id and return another copy.

        Raises:
            MissingValueError: If student or a required field is missing
            DuplicateEmailError: If any stored student owns the email
        """
        self._require_student(student)
        self._require_fields(student)

        with self._lock:
            self._check_email_free(student.email, exclude_id=None)
            stored = student.copy(with_id=False)
            stored.assign_id(self._take_id())
            self._students[stored.id] = stored
            logger.info("Created student id=%s email=%s", stored.id, mask_email(stored.email))
            return stored.copy()

    def find_by_id(self, student_id: int) -> Student | None:
        self._require_id(student_id)
        with self._lock:
            student = self._students.get(student_id)
            return student.copy() if student is not None else None

    def find_by_email(self, email: str) -> Student | None:
        wanted = self._require_email(email)
        with self._lock:
            for student in self._students.values():
                if student.email == wanted:
                    return student.copy()
        return None

    def list_all(self) -> list[Student]:
        with self._lock:
            active = [s.copy() for s in self._students.values() if s.active]
        return sorted(active, key=self._sort_key)

    def list_by_major(self, major: str) -> list[Student]:
        """Active students whose major matches under ``str.lower``."""
        wanted = self._require_major(major).lower()
        with self._lock:
            matches = [
                s.copy()
                for s in self._students.values()
                if s.active and s.major.lower() == wanted
            ]
        return sorted(matches, key=self._sort_key)

    def update(self, student: Student) -> Student:
        """Replace the stored student with a copy of ``student``.

        Raises:
            StudentNotFoundError: If the id is unknown
            DuplicateEmailError: If another student owns the email
        """
        self._require_student(student)
        student_id = self._require_id(student.id)
        self._require_fields(student)

        with self._lock:
            if student_id not in self._students:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            self._check_email_free(student.email, exclude_id=student_id)
            stored = student.copy()
            self._students[student_id] = stored
            logger.info("Updated student id=%s", student_id)
            return stored.copy()

    def delete(self, student_id: int) -> bool:
        """Deactivate the stored student. Returns True even if already inactive."""
        self._require_id(student_id)
        with self._lock:
            student = self._students.get(student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            student.deactivate()
        logger.info("Soft-deleted student id=%s", student_id)
        return True

    def exists(self, student_id: int) -> bool:
        self._require_id(student_id)
        with self._lock:
            return student_id in self._students

    def exists_by_email(self, email: str) -> bool:
        wanted = self._require_email(email)
        with self._lock:
            return any(s.email == wanted for s in self._students.values())

    def count(self) -> int:
        with self._lock:
            return sum(1 for s in self._students.values() if s.active)

    # --- Maintenance helpers ---

    def clear(self) -> None:
        """Drop every student and restart ids at 1."""
        with self._lock:
            self._students.clear()
            self._next_id = 1
        logger.info("In-memory store cleared")

    def stats(self) -> StoreStats:
        """Return counts over the whole store, inactive students included."""
        with self._lock:
            students = list(self._students.values())
            next_id = self._next_id
        active = [s for s in students if s.active]
        return StoreStats(
            total=len(students),
            active=len(active),
            inactive=len(students) - len(active),
            next_id=next_id,
            by_major=dict(Counter(s.major for s in active)),
        )

    # --- Internals (caller holds the lock) ---

    def _take_id(self) -> int:
        student_id = self._next_id
        self._next_id += 1
        return student_id

    def _check_email_free(self, email: str, exclude_id: int | None) -> None:
        wanted = email.strip().lower()
        for student in self._students.values():
            if student.email == wanted and student.id != exclude_id:
                logger.warning("Rejected duplicate email %s", mask_email(wanted))
                raise DuplicateEmailError("A student with this email already exists")
