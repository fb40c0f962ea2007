"""Unit tests for StudentService."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from roster.repository import (
    DuplicateEmailError,
    InMemoryStudentRepository,
    RepositoryError,
    RepositoryErrorCode,
    StudentRepository,
)
from roster.service import (
    BusinessRuleError,
    DataAccessError,
    ErrorKind,
    ServiceErrorCode,
    ServiceValidationError,
    StudentDTO,
    StudentService,
    UnexpectedServiceError,
)


def ana() -> StudentDTO:
    return StudentDTO(first_name="Ana", last_name="Lee", email="ana@x.com", major="CS")


@pytest.fixture
def service() -> StudentService:
    """Service over an empty in-memory repository."""
    return StudentService(InMemoryStudentRepository())


@pytest.fixture
def broken_repo() -> MagicMock:
    """Repository whose every call fails with a storage error."""
    repo = MagicMock(spec=StudentRepository)
    error = RepositoryError("disk on fire", RepositoryErrorCode.SQL_ERROR)
    for name in (
        "create",
        "find_by_id",
        "find_by_email",
        "list_all",
        "list_by_major",
        "update",
        "delete",
        "exists",
        "exists_by_email",
        "count",
    ):
        getattr(repo, name).side_effect = error
    return repo


@pytest.mark.unit
class TestConstruction:
    def test_repository_required(self) -> None:
        with pytest.raises(ValueError):
            StudentService(None)  # type: ignore[arg-type]


@pytest.mark.unit
class TestRegister:
    """Tests for register."""

    def test_register_success(self, service: StudentService) -> None:
        created = service.register(ana())

        assert created.id == 1
        assert created.active is True
        assert created.full_name == "Ana Lee"
        assert created.email == "ana@x.com"

    def test_register_forces_active_and_ignores_id(self, service: StudentService) -> None:
        dto = ana()
        dto.id = 77
        dto.active = False

        created = service.register(dto)

        assert created.id == 1
        assert created.active is True

    def test_register_none(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.register(None)  # type: ignore[arg-type]

        assert exc_info.value.code == ServiceErrorCode.NULL_DTO
        assert exc_info.value.is_validation_error

    def test_register_invalid_dto(self, service: StudentService) -> None:
        dto = ana()
        dto.email = "not-an-email"

        with pytest.raises(ServiceValidationError) as exc_info:
            service.register(dto)

        assert exc_info.value.code == ServiceErrorCode.INVALID_DATA
        assert service.count_active() == 0

    def test_register_future_enrollment_date(self, service: StudentService) -> None:
        dto = ana()
        dto.enrollment_date = date.today() + timedelta(days=1)

        with pytest.raises(ServiceValidationError):
            service.register(dto)

    def test_register_duplicate_email_is_business_error(self, service: StudentService) -> None:
        service.register(ana())
        dto = StudentDTO(first_name="Bo", last_name="Kim", email="ANA@X.COM", major="EE")

        with pytest.raises(BusinessRuleError) as exc_info:
            service.register(dto)

        assert exc_info.value.code == ServiceErrorCode.DUPLICATE_EMAIL
        assert exc_info.value.kind == ErrorKind.BUSINESS
        assert service.count_active() == 1

    def test_register_race_loser_gets_business_error(self) -> None:
        """A duplicate caught by the repository itself maps to the same business error."""
        repo = MagicMock(spec=StudentRepository)
        repo.exists_by_email.return_value = False
        repo.create.side_effect = DuplicateEmailError("taken")

        with pytest.raises(BusinessRuleError) as exc_info:
            StudentService(repo).register(ana())

        assert exc_info.value.code == ServiceErrorCode.DUPLICATE_EMAIL
        assert isinstance(exc_info.value.cause, DuplicateEmailError)

    def test_register_repository_failure(self, broken_repo: MagicMock) -> None:
        with pytest.raises(DataAccessError) as exc_info:
            StudentService(broken_repo).register(ana())

        assert exc_info.value.code == ServiceErrorCode.REGISTER_ERROR
        assert exc_info.value.is_data_error
        assert isinstance(exc_info.value.__cause__, RepositoryError)


@pytest.mark.unit
class TestQueries:
    """Tests for find and list operations."""

    def test_find_by_id(self, service: StudentService) -> None:
        created = service.register(ana())

        found = service.find_by_id(created.id)

        assert found == created

    def test_find_by_id_missing(self, service: StudentService) -> None:
        assert service.find_by_id(5) is None

    def test_find_by_id_none(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.find_by_id(None)  # type: ignore[arg-type]

        assert exc_info.value.code == ServiceErrorCode.NULL_ID

    def test_find_by_email(self, service: StudentService) -> None:
        service.register(ana())

        assert service.find_by_email("ANA@x.com").first_name == "Ana"
        assert service.find_by_email("bo@x.com") is None

    def test_find_by_email_blank(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.find_by_email("  ")

        assert exc_info.value.code == ServiceErrorCode.EMPTY_EMAIL

    def test_list_active_preserves_order(self, service: StudentService) -> None:
        service.register(StudentDTO(first_name="Bo", last_name="Kim", email="bo@x.com", major="EE"))
        service.register(ana())

        assert [s.full_name for s in service.list_active()] == ["Bo Kim", "Ana Lee"]

    def test_list_by_major(self, service: StudentService) -> None:
        service.register(ana())
        service.register(StudentDTO(first_name="Bo", last_name="Kim", email="bo@x.com", major="EE"))

        assert [s.first_name for s in service.list_by_major("cs")] == ["Ana"]

    def test_list_by_major_blank(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.list_by_major("")

        assert exc_info.value.code == ServiceErrorCode.EMPTY_MAJOR

    def test_query_failures_carry_operation_codes(self, broken_repo: MagicMock) -> None:
        service = StudentService(broken_repo)
        calls = [
            (lambda: service.find_by_id(1), ServiceErrorCode.FIND_ERROR),
            (lambda: service.find_by_email("a@x.com"), ServiceErrorCode.FIND_BY_EMAIL_ERROR),
            (service.list_active, ServiceErrorCode.LIST_ERROR),
            (lambda: service.list_by_major("CS"), ServiceErrorCode.LIST_BY_MAJOR_ERROR),
            (service.count_active, ServiceErrorCode.COUNT_ERROR),
            (service.statistics, ServiceErrorCode.STATISTICS_ERROR),
            (lambda: service.validate_email_unique("a@x.com"), ServiceErrorCode.EMAIL_CHECK_ERROR),
        ]

        for call, code in calls:
            with pytest.raises(DataAccessError) as exc_info:
                call()
            assert exc_info.value.code == code


@pytest.mark.unit
class TestUpdate:
    """Tests for update."""

    def test_update_success(self, service: StudentService) -> None:
        created = service.register(ana())
        created.first_name = "Anabel"
        created.major = "Math"

        updated = service.update(created)

        assert updated.full_name == "Anabel Lee"
        assert service.find_by_id(created.id).major == "Math"

    def test_update_unknown_id(self, service: StudentService) -> None:
        dto = ana()
        dto.id = 999

        with pytest.raises(BusinessRuleError) as exc_info:
            service.update(dto)

        assert exc_info.value.code == ServiceErrorCode.STUDENT_NOT_FOUND
        assert service.count_active() == 0

    def test_update_without_id(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.update(ana())

        assert exc_info.value.code == ServiceErrorCode.NULL_ID

    def test_update_none(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError) as exc_info:
            service.update(None)  # type: ignore[arg-type]

        assert exc_info.value.code == ServiceErrorCode.NULL_DTO

    def test_update_email_taken(self, service: StudentService) -> None:
        service.register(ana())
        bo = service.register(
            StudentDTO(first_name="Bo", last_name="Kim", email="bo@x.com", major="EE")
        )
        bo.email = "Ana@X.com"

        with pytest.raises(BusinessRuleError) as exc_info:
            service.update(bo)

        assert exc_info.value.code == ServiceErrorCode.DUPLICATE_EMAIL
        assert service.find_by_id(bo.id).email == "bo@x.com"

    def test_update_repository_failure(self, broken_repo: MagicMock) -> None:
        dto = ana()
        dto.id = 1

        with pytest.raises(DataAccessError) as exc_info:
            StudentService(broken_repo).update(dto)

        assert exc_info.value.code == ServiceErrorCode.UPDATE_ERROR


@pytest.mark.unit
class TestDeleteAndReactivate:
    """Tests for delete and reactivate."""

    def test_delete(self, service: StudentService) -> None:
        created = service.register(ana())

        assert service.delete(created.id) is True
        assert service.list_active() == []
        assert service.find_by_id(created.id).active is False

    def test_delete_unknown(self, service: StudentService) -> None:
        with pytest.raises(BusinessRuleError) as exc_info:
            service.delete(3)

        assert exc_info.value.code == ServiceErrorCode.STUDENT_NOT_FOUND

    def test_delete_none(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError):
            service.delete(None)  # type: ignore[arg-type]

    def test_reactivate(self, service: StudentService) -> None:
        created = service.register(ana())
        service.delete(created.id)

        reactivated = service.reactivate(created.id)

        assert reactivated.active is True
        assert [s.id for s in service.list_active()] == [created.id]

    def test_reactivate_unknown(self, service: StudentService) -> None:
        with pytest.raises(BusinessRuleError) as exc_info:
            service.reactivate(9)

        assert exc_info.value.code == ServiceErrorCode.STUDENT_NOT_FOUND

    def test_delete_failure(self, broken_repo: MagicMock) -> None:
        with pytest.raises(DataAccessError) as exc_info:
            StudentService(broken_repo).delete(1)

        assert exc_info.value.code == ServiceErrorCode.DELETE_ERROR

    def test_reactivate_failure(self, broken_repo: MagicMock) -> None:
        with pytest.raises(DataAccessError) as exc_info:
            StudentService(broken_repo).reactivate(1)

        assert exc_info.value.code == ServiceErrorCode.REACTIVATE_ERROR


@pytest.mark.unit
class TestStatisticsAndEmailCheck:
    """Tests for statistics and validate_email_unique."""

    def test_statistics(self, service: StudentService) -> None:
        service.register(ana())
        service.register(StudentDTO(first_name="Bo", last_name="Kim", email="bo@x.com", major="EE"))
        cy = service.register(
            StudentDTO(first_name="Cy", last_name="Abe", email="cy@x.com", major="EE")
        )
        service.delete(cy.id)

        stats = service.statistics()

        assert stats.total_active == 2
        assert stats.by_major == {"CS": 1, "EE": 1}
        assert stats.generated_at.tzinfo is not None

    def test_statistics_not_cached(self, service: StudentService) -> None:
        assert service.statistics().total_active == 0

        service.register(ana())

        assert service.statistics().total_active == 1

    def test_validate_email_unique(self, service: StudentService) -> None:
        created = service.register(ana())

        assert service.validate_email_unique("bo@x.com") is True
        assert service.validate_email_unique("ana@x.com") is False
        assert service.validate_email_unique("ANA@x.com", exclude_id=created.id) is True
        assert service.validate_email_unique("ana@x.com", exclude_id=created.id + 1) is False

    def test_validate_email_unique_blank(self, service: StudentService) -> None:
        with pytest.raises(ServiceValidationError):
            service.validate_email_unique("")


@pytest.mark.unit
class TestUnexpectedErrors:
    """Non-repository failures surface as system errors."""

    def test_unexpected_exception_wrapped(self) -> None:
        repo = MagicMock(spec=StudentRepository)
        repo.count.side_effect = RuntimeError("surprise")

        with pytest.raises(UnexpectedServiceError) as exc_info:
            StudentService(repo).count_active()

        assert exc_info.value.code == ServiceErrorCode.SYSTEM_ERROR
        assert exc_info.value.is_system_error
        assert isinstance(exc_info.value.cause, RuntimeError)
