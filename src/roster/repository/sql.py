"""Relational student repository built on SQLAlchemy."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from roster.logging import get_logger, mask_email
from roster.repository.base import StudentRepository
from roster.repository.database import Database
from roster.repository.exceptions import (
    DuplicateEmailError,
    RepositoryError,
    RepositoryErrorCode,
    StudentNotFoundError,
)
from roster.repository.models import StudentRecord
from roster.students import Student

logger = get_logger("repository.sql")


def _to_entity(record: StudentRecord) -> Student:
    return Student(
        first_name=record.first_name,
        last_name=record.last_name,
        email=record.email,
        major=record.major,
        enrollment_date=record.enrollment_date,
        id=record.id,
        active=record.active,
    )


def _sql_error(action: str, error: SQLAlchemyError) -> RepositoryError:
    logger.error("Database error while %s: %s", action, error)
    return RepositoryError(
        f"Database error while {action}", RepositoryErrorCode.SQL_ERROR, cause=error
    )


class SqlStudentRepository(StudentRepository):
    """Repository backed by a relational database.

    Each call opens its own session and closes it on every exit path. Driver
    errors are wrapped in RepositoryError(SQL_ERROR); the UNIQUE constraint on
    ``email`` backs up the explicit duplicate check.
    """

    def __init__(self, database: Database | str = "roster.db", create_schema: bool = True) -> None:
        """Initialize the repository.

        Args:
            database: A Database, or a path / URL to build one from.
            create_schema: Create the ``students`` table if it doesn't exist.
        """
        self._db = database if isinstance(database, Database) else Database(database)
        if create_schema:
            self.init_schema()

    def init_schema(self) -> None:
        """Create the ``students`` table and its indexes if missing.

        Raises:
            RepositoryError: INIT_BD_ERROR if the schema cannot be created
        """
        try:
            self._db.create_tables()
        except SQLAlchemyError as e:
            logger.error("Schema initialization failed: %s", e)
            raise RepositoryError(
                "Could not initialize the database schema",
                RepositoryErrorCode.SCHEMA_INIT_ERROR,
                cause=e,
            ) from e

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def create(self, student: Student) -> Student:
        """Insert a new student row.

        Args:
            student: Student to store. Its id, if any, is ignored.

        Returns:
            A new Student carrying the database-assigned id.

        Raises:
            MissingValueError: If student or a required field is missing
            DuplicateEmailError: If the email is already in use
            RepositoryError: SQL_ERROR on any other database failure
        """
        self._require_student(student)
        self._require_fields(student)

        session = self._db.get_session()
        try:
            if self._email_taken(session, student.email, exclude_id=None):
                logger.warning("Rejected duplicate email %s", mask_email(student.email))
                raise DuplicateEmailError("A student with this email already exists")

            record = StudentRecord(
                first_name=student.first_name,
                last_name=student.last_name,
                email=student.email,
                major=student.major,
                enrollment_date=student.enrollment_date,
                active=student.active,
            )
            session.add(record)
            session.commit()
            logger.info("Created student id=%s email=%s", record.id, mask_email(record.email))
            return _to_entity(record)
        except IntegrityError as e:
            session.rollback()
            if "UNIQUE" in str(e).upper() or "students.email" in str(e):
                raise DuplicateEmailError(
                    "A student with this email already exists", cause=e
                ) from e
            raise _sql_error("creating a student", e) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise _sql_error("creating a student", e) from e
        finally:
            session.close()

    def find_by_id(self, student_id: int) -> Student | None:
        """Get a student by id, active or not.

        Args:
            student_id: Student id

        Returns:
            Student if found, None otherwise
        """
        self._require_id(student_id)
        session = self._db.get_session()
        try:
            record = session.get(StudentRecord, student_id)
            return _to_entity(record) if record is not None else None
        except SQLAlchemyError as e:
            raise _sql_error("finding a student by id", e) from e
        finally:
            session.close()

    def find_by_email(self, email: str) -> Student | None:
        """Get a student by email, ignoring case and surrounding whitespace.

        Args:
            email: Email address

        Returns:
            Student if found, None otherwise
        """
        wanted = self._require_email(email)
        session = self._db.get_session()
        try:
            stmt = select(StudentRecord).where(self._db.lower(StudentRecord.email) == wanted)
            record = session.execute(stmt).scalars().first()
            return _to_entity(record) if record is not None else None
        except SQLAlchemyError as e:
            raise _sql_error("finding a student by email", e) from e
        finally:
            session.close()

    def list_all(self) -> list[Student]:
        """List active students ordered by last name, then first name."""
        session = self._db.get_session()
        try:
            stmt = (
                select(StudentRecord)
                .where(StudentRecord.active.is_(True))
                .order_by(StudentRecord.last_name, StudentRecord.first_name, StudentRecord.id)
            )
            return [_to_entity(r) for r in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise _sql_error("listing students", e) from e
        finally:
            session.close()

    def list_by_major(self, major: str) -> list[Student]:
        """List active students of a major, compared case-insensitively.

        Args:
            major: Major name

        Returns:
            Matching students in list_all order
        """
        wanted = self._require_major(major).lower()
        session = self._db.get_session()
        try:
            stmt = (
                select(StudentRecord)
                .where(
                    self._db.lower(StudentRecord.major) == wanted,
                    StudentRecord.active.is_(True),
                )
                .order_by(StudentRecord.last_name, StudentRecord.first_name, StudentRecord.id)
            )
            return [_to_entity(r) for r in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise _sql_error("listing students by major", e) from e
        finally:
            session.close()

    def update(self, student: Student) -> Student:
        """Overwrite every field of an existing student row.

        Args:
            student: Student carrying the id of the row to replace.

        Returns:
            The stored student.

        Raises:
            MissingValueError: If student, its id or a required field is missing
            StudentNotFoundError: If no row has this id
            DuplicateEmailError: If another student uses the email
            RepositoryError: SQL_ERROR on any other database failure
        """
        self._require_student(student)
        student_id = self._require_id(student.id)
        self._require_fields(student)

        session = self._db.get_session()
        try:
            record = session.get(StudentRecord, student_id)
            if record is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            if self._email_taken(session, student.email, exclude_id=student_id):
                logger.warning("Rejected duplicate email %s", mask_email(student.email))
                raise DuplicateEmailError("Another student already uses this email")

            record.first_name = student.first_name
            record.last_name = student.last_name
            record.email = student.email
            record.major = student.major
            record.enrollment_date = student.enrollment_date
            record.active = student.active

            session.commit()
            logger.info("Updated student id=%s", student_id)
            return _to_entity(record)
        except IntegrityError as e:
            session.rollback()
            raise DuplicateEmailError("Another student already uses this email", cause=e) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise _sql_error("updating a student", e) from e
        finally:
            session.close()

    def delete(self, student_id: int) -> bool:
        """Soft-delete a student by clearing its ``active`` flag.

        Args:
            student_id: Student id

        Returns:
            True, also when the student was already inactive

        Raises:
            StudentNotFoundError: If no row has this id
        """
        self._require_id(student_id)
        session = self._db.get_session()
        try:
            stmt = (
                update(StudentRecord)
                .where(StudentRecord.id == student_id)
                .values(active=False)
            )
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            session.commit()
            logger.info("Soft-deleted student id=%s", student_id)
            return True
        except SQLAlchemyError as e:
            session.rollback()
            raise _sql_error("deleting a student", e) from e
        finally:
            session.close()

    def exists(self, student_id: int) -> bool:
        """Check whether a row with this id exists, active or not."""
        self._require_id(student_id)
        session = self._db.get_session()
        try:
            stmt = select(func.count()).select_from(StudentRecord).where(
                StudentRecord.id == student_id
            )
            return (session.execute(stmt).scalar() or 0) > 0
        except SQLAlchemyError as e:
            raise _sql_error("checking a student id", e) from e
        finally:
            session.close()

    def exists_by_email(self, email: str) -> bool:
        """Check whether any student, active or not, owns this email."""
        wanted = self._require_email(email)
        session = self._db.get_session()
        try:
            return self._email_taken(session, wanted, exclude_id=None)
        except SQLAlchemyError as e:
            raise _sql_error("checking an email", e) from e
        finally:
            session.close()

    def count(self) -> int:
        """Count active students."""
        session = self._db.get_session()
        try:
            stmt = select(func.count()).select_from(StudentRecord).where(
                StudentRecord.active.is_(True)
            )
            return session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            raise _sql_error("counting students", e) from e
        finally:
            session.close()

    def _email_taken(self, session: Session, email: str, exclude_id: int | None) -> bool:
        stmt = select(func.count()).select_from(StudentRecord).where(
            self._db.lower(StudentRecord.email) == email.strip().lower()
        )
        if exclude_id is not None:
            stmt = stmt.where(StudentRecord.id != exclude_id)
        return (session.execute(stmt).scalar() or 0) > 0
