"""Person records, list queries and paginated results."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import CHAR, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

_ZERO_VALUES: dict[str, Any] = {
    "name": "",
    "surname": "",
    "patronymic": "",
    "age": 0,
    "gender": "",
    "nationality": "",
}


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


class Base(DeclarativeBase):
    """Declarative base for every mapped table."""


class Person(Base):
    """A person stored in the directory."""

    __tablename__ = "people"
    __table_args__ = (
        Index("idx_person_name", "name"),
        Index("idx_person_surname", "surname"),
        Index("idx_person_age", "age"),
        Index("idx_person_gender", "gender"),
        Index("idx_person_nationality", "nationality"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    surname: Mapped[str] = mapped_column(String(100), nullable=False)
    patronymic: Mapped[str | None] = mapped_column(String(100), nullable=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    nationality: Mapped[str] = mapped_column(CHAR(2), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __init__(self, **kwargs: Any) -> None:
        for key, value in _ZERO_VALUES.items():
            kwargs.setdefault(key, value)
        super().__init__(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the record."""
        return {
            "ID": str(self.id) if self.id is not None else None,
            "Name": self.name,
            "Surname": self.surname,
            "Patronymic": self.patronymic or "",
            "Age": self.age,
            "Gender": self.gender,
            "Nationality": self.nationality,
            "CreatedAt": _iso(self.created_at),
            "UpdatedAt": _iso(self.updated_at),
        }


@dataclass
class PersonQuery:
    """Filters and paging for listing people."""

    name: str = ""
    surname: str = ""
    gender: str = ""
    nationality: str = ""
    min_age: int = 0
    max_age: int = 0
    page: int = 1
    page_size: int = 10


@dataclass
class PaginatedPersons:
    """One page of people together with paging totals."""

    data: list[Person] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the page."""
        return {
            "Data": [person.to_dict() for person in self.data],
            "Total": self.total,
            "Page": self.page,
            "PageSize": self.page_size,
            "TotalPages": self.total_pages,
        }