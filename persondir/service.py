"""Business operations on people."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from persondir.domain import PaginatedPersons, Person, PersonQuery
from persondir.external_api import NameMetricsFetcher
from persondir.repository import PersonRepository, Repositories, RepositoryError


class ServiceError(Exception):
    """A service operation was refused or failed."""


@dataclass(frozen=True)
class NewPersonCreate:
    """Data needed to register a new person."""

    name: str
    surname: str
    patronymic: str = ""


class PersonService:
    """Registers, finds, edits and removes people."""

    def __init__(
        self, repo: PersonRepository, fetcher: NameMetricsFetcher, domain: str = ""
    ) -> None:
        self.repo = repo
        self.fetcher = fetcher
        self.domain = domain

    def add(self, new_person: NewPersonCreate) -> str:
        """Enrich the person with name estimates, store it and return its id."""
        person_id = uuid.uuid4()
        metrics = self.fetcher.get_name_metrics(new_person.name)
        person = Person(
            id=person_id,
            name=new_person.name,
            surname=new_person.surname,
            patronymic=new_person.patronymic,
            age=metrics.age,
            gender=metrics.gender,
            nationality=metrics.nationality,
        )
        try:
            self.repo.create(person)
        except RepositoryError as exc:
            raise ServiceError(f"failed to create person: {exc}") from exc
        return str(person_id)

    def get_with_filter(self, query: PersonQuery) -> PaginatedPersons:
        return self.repo.get_by_filter(query)

    def get_by_id(self, person_id: str) -> Person:
        return self.repo.get_by_id(person_id)

    def delete_by_id(self, person_id: str) -> None:
        if not person_id:
            raise ServiceError("id is empty")
        self.repo.delete_by_id(person_id)

    def edit(self, edited: Person) -> None:
        if edited.id is None:
            raise ServiceError("id is required")
        self.repo.edit(edited)


@dataclass
class Deps:
    """What the services are built from."""

    repo: Repositories
    fetcher: NameMetricsFetcher
    domain: str = ""


@dataclass
class Services:
    """All services of the application."""

    person: PersonService

    @classmethod
    def from_deps(cls, deps: Deps) -> Services:
        return cls(person=PersonService(deps.repo.person, deps.fetcher, deps.domain))