import uuid

import pytest

from persondir.database import Database
from persondir.domain import Person, PersonQuery
from persondir.external_api import ExternalAPIError, NameMetrics
from persondir.repository import PersonNotFoundError, Repositories, RepositoryError
from persondir.service import Deps, NewPersonCreate, PersonService, ServiceError, Services


class FakeFetcher:
    def __init__(self, metrics=None, error=None):
        self.metrics = metrics or NameMetrics(age=33, gender="female", nationality="DE")
        self.error = error
        self.names = []

    def get_name_metrics(self, name):
        self.names.append(name)
        if self.error is not None:
            raise self.error
        return self.metrics


class FailingRepo:
    def create(self, person):
        raise RepositoryError("disk full")


@pytest.fixture
def repos():
    db = Database("sqlite://")
    yield Repositories.from_database(db)
    db.close()


def test_add_stores_enriched_person(repos):
    fetcher = FakeFetcher()
    service = PersonService(repos.person, fetcher, "localhost")
    new_id = service.add(NewPersonCreate(name="Anna", surname="Schmidt", patronymic="Karlovna"))
    assert str(uuid.UUID(new_id)) == new_id
    assert fetcher.names == ["Anna"]
    person = service.get_by_id(new_id)
    assert (person.name, person.surname, person.patronymic) == ("Anna", "Schmidt", "Karlovna")
    assert (person.age, person.gender, person.nationality) == (33, "female", "DE")


def test_add_propagates_fetch_errors(repos):
    service = PersonService(repos.person, FakeFetcher(error=ExternalAPIError("down")), "")
    with pytest.raises(ExternalAPIError):
        service.add(NewPersonCreate(name="Anna", surname="Schmidt"))
    assert service.get_with_filter(PersonQuery()).total == 0


def test_add_wraps_repository_errors():
    service = PersonService(FailingRepo(), FakeFetcher(), "")
    with pytest.raises(ServiceError, match="failed to create person"):
        service.add(NewPersonCreate(name="Anna", surname="Schmidt"))


def test_get_with_filter(repos):
    service = PersonService(repos.person, FakeFetcher(), "")
    service.add(NewPersonCreate(name="Anna", surname="Schmidt"))
    service.add(NewPersonCreate(name="Boris", surname="Schmidt"))
    result = service.get_with_filter(PersonQuery(name="bor"))
    assert [p.name for p in result.data] == ["Boris"]


def test_delete(repos):
    service = PersonService(repos.person, FakeFetcher(), "")
    new_id = service.add(NewPersonCreate(name="Anna", surname="Schmidt"))
    service.delete_by_id(new_id)
    with pytest.raises(PersonNotFoundError):
        service.get_by_id(new_id)


def test_delete_empty_id(repos):
    service = PersonService(repos.person, FakeFetcher(), "")
    with pytest.raises(ServiceError, match="id is empty"):
        service.delete_by_id("")


def test_edit(repos):
    service = PersonService(repos.person, FakeFetcher(), "")
    new_id = service.add(NewPersonCreate(name="Anna", surname="Schmidt"))
    service.edit(Person(id=uuid.UUID(new_id), surname="Mueller", age=40))
    person = service.get_by_id(new_id)
    assert (person.name, person.surname, person.age) == ("Anna", "Mueller", 40)


def test_edit_without_id(repos):
    service = PersonService(repos.person, FakeFetcher(), "")
    with pytest.raises(ServiceError, match="id is required"):
        service.edit(Person(name="Anna"))


def test_services_from_deps(repos):
    fetcher = FakeFetcher()
    services = Services.from_deps(Deps(repo=repos, fetcher=fetcher, domain="localhost"))
    assert services.person.domain == "localhost"
    assert services.person.fetcher is fetcher
    new_id = services.person.add(NewPersonCreate(name="Anna", surname="Schmidt"))
    assert services.person.get_by_id(new_id).name == "Anna"