"""SQLAlchemy models for the relational backend."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy

from sqlalchemy import Boolean, Date, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StudentRecord(Base):
    """Row in the ``students`` table.

    Emails are stored already lower-cased by the entity, so the UNIQUE
    constraint on ``email`` is effectively case-insensitive.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    major: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<StudentRecord(id={self.id!r}, email={self.email!r}, active={self.active!r})>"
