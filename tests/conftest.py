"""Shared pytest fixtures and configuration."""

import logging
from collections.abc import Iterator

import pytest

from roster.repository import (
    InMemoryStudentRepository,
    SqlStudentRepository,
    StudentRepository,
)
from roster.students import Student


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture(autouse=True)
def reset_roster_logger() -> Iterator[None]:
    """Detach handlers added by setup_logging so temp directories can be removed."""
    yield
    logger = logging.getLogger("roster")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(params=["memory", "sql"])
def repository(request: pytest.FixtureRequest) -> Iterator[StudentRepository]:
    """Each backend in turn, so contract tests run against both."""
    if request.param == "memory":
        yield InMemoryStudentRepository()
        return
    repo = SqlStudentRepository(":memory:")
    yield repo
    repo.close()


@pytest.fixture
def make_student():
    """Factory for valid, unsaved students."""

    def _make(
        first_name: str = "Ana",
        last_name: str = "Lee",
        email: str = "ana@x.com",
        major: str = "CS",
        **kwargs,
    ) -> Student:
        return Student(first_name, last_name, email, major, **kwargs)

    return _make
