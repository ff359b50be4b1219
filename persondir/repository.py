"""Storage of people."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from persondir.database import Database
from persondir.domain import PaginatedPersons, Person, PersonQuery, utcnow

_MAX_PAGE_SIZE = 100
_DEFAULT_PAGE_SIZE = 10
_EDITABLE_FIELDS = ("name", "surname", "patronymic", "age", "gender", "nationality")


class RepositoryError(Exception):
    """A storage operation failed."""


class PersonNotFoundError(RepositoryError):
    """No person has the requested id."""


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise RepositoryError(str(exc)) from exc


def _parse_id(person_id: Any) -> uuid.UUID:
    if isinstance(person_id, uuid.UUID):
        return person_id
    try:
        return uuid.UUID(str(person_id))
    except ValueError as exc:
        raise RepositoryError(f"invalid id {person_id!r}") from exc


class PersonRepository:
    """Reads and writes people in the database."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, person: Person) -> None:
        """Insert a new person."""
        if person.id is None:
            raise RepositoryError("empty id")
        now = utcnow()
        if person.created_at is None:
            person.created_at = now
        if person.updated_at is None:
            person.updated_at = now
        with _translate_errors(), self._db.session() as session:
            session.add(person)

    def get_by_filter(self, query: PersonQuery) -> PaginatedPersons:
        """Return one page of people matching the query."""
        conditions = []
        if query.name:
            conditions.append(Person.name.ilike(f"%{query.name}%"))
        if query.surname:
            conditions.append(Person.surname.ilike(f"%{query.surname}%"))
        if query.gender:
            conditions.append(Person.gender == query.gender)
        if query.nationality:
            conditions.append(Person.nationality == query.nationality)
        if query.min_age > 0:
            conditions.append(Person.age >= query.min_age)
        if query.max_age > 0:
            conditions.append(Person.age <= query.max_age)

        count_stmt = select(func.count()).select_from(Person)
        rows_stmt = select(Person)
        for condition in conditions:
            count_stmt = count_stmt.where(condition)
            rows_stmt = rows_stmt.where(condition)

        page = max(query.page, 1)
        page_size = query.page_size
        if page_size < 1 or page_size > _MAX_PAGE_SIZE:
            page_size = _DEFAULT_PAGE_SIZE
        offset = (page - 1) * page_size

        with _translate_errors(), self._db.session() as session:
            total = session.scalar(count_stmt) or 0
            persons = list(session.scalars(rows_stmt.limit(page_size).offset(offset)))

        return PaginatedPersons(
            data=persons,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=-(-total // page_size),
        )

    def get_by_id(self, person_id: str | uuid.UUID) -> Person:
        """Return the person with the given id."""
        key = _parse_id(person_id)
        with _translate_errors(), self._db.session() as session:
            person = session.get(Person, key)
        if person is None:
            raise PersonNotFoundError("record not found")
        return person

    def delete_by_id(self, person_id: str | uuid.UUID) -> None:
        """Delete the person with the given id."""
        if person_id is None or person_id == "":
            raise RepositoryError("id is empty")
        key = _parse_id(person_id)
        with _translate_errors(), self._db.session() as session:
            person = session.get(Person, key)
            if person is None:
                raise PersonNotFoundError("record not found")
            session.delete(person)

    def edit(self, updated: Person) -> None:
        """Overwrite the stored fields that are set (non-empty, non-zero) in ``updated``."""
        if updated.id is None:
            raise RepositoryError("empty id")
        key = _parse_id(updated.id)
        values: dict[str, Any] = {
            name: getattr(updated, name)
            for name in _EDITABLE_FIELDS
            if getattr(updated, name)
        }
        values["updated_at"] = utcnow()
        stmt = update(Person).where(Person.id == key).values(**values)
        with _translate_errors(), self._db.session() as session:
            session.execute(stmt)


@dataclass
class Repositories:
    """All repositories of the application."""

    person: PersonRepository

    @classmethod
    def from_database(cls, database: Database) -> Repositories:
        return cls(person=PersonRepository(database))