"""Database connection manager for the relational backend."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, func, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from roster.repository.models import Base

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Engine

MEMORY_DB = ":memory:"

# SQLite's built-in lower() only folds ASCII
SQLITE_LOWER_FUNCTION = "py_lower"


def _py_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def _to_url(database: str) -> str:
    """Turn a bare path or ':memory:' into an SQLAlchemy URL."""
    if "://" in database:
        return database
    if database == MEMORY_DB:
        return "sqlite:///:memory:"
    return f"sqlite:///{database}"


class Database:
    """Database connection manager.

    ``":memory:"`` keeps one shared connection alive (StaticPool) since the
    data lives in that connection. Everything else uses NullPool: each session
    opens its own connection and closes it when the session closes.
    """

    def __init__(self, database: str = "roster.db") -> None:
        """Initialize database connection.

        Args:
            database: SQLite file path, ":memory:" or a full SQLAlchemy URL.
        """
        self.database = database
        self.url = _to_url(database)
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.url in ("sqlite://", "sqlite:///:memory:")

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.is_memory:
                self._engine = create_engine(
                    self.url,
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                if self.is_sqlite and "://" not in self.database:
                    Path(self.database).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(self.url, echo=False, poolclass=NullPool)

            if self.is_sqlite:

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()
                    dbapi_connection.create_function(  # type: ignore[attr-defined]
                        SQLITE_LOWER_FUNCTION, 1, _py_lower, deterministic=True
                    )

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def lower(self, expression: ColumnElement[str]) -> ColumnElement[str]:
        """Lower-case a SQL expression the way Python's ``str.lower`` does.

        Args:
            expression: Column or expression to fold.

        Returns:
            The folded expression, usable in WHERE clauses.
        """
        if self.is_sqlite:
            return getattr(func, SQLITE_LOWER_FUNCTION)(expression)
        return func.lower(expression)

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables."""
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            return result.scalar() == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
