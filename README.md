# persondir

A small REST service that keeps a directory of people in a relational
database. When a person is added, only the name, surname and (optionally)
patronymic are given. The service then asks three name-statistics services,
concurrently, for the most likely age, gender and nationality of that first
name, and stores the complete record.

## Features

- Create, read, update and delete people over JSON.
- List people with filters (partial, case-insensitive match on name and
  surname; exact match on gender and nationality; an age range) and
  pagination.
- Enrichment of new entries from age, gender and nationality lookups with a
  five-second timeout. If any lookup fails, or the age is 0, or gender or
  nationality is empty, the person is not created.
- Permissive CORS headers (`Access-Control-Allow-Origin`, `-Methods` and
  `-Headers` all `*`) on every response; `OPTIONS` requests are answered
  straight away with status 200.
- Interactive API documentation at `/swagger/index.html`, with the OpenAPI
  document at `/swagger/doc.json`.

## Configuration

Settings are read from the environment, on top of a `.env` file in the
working directory. Variables already set in the environment take precedence
over the file.

| Variable          | Meaning                                                       |
|-------------------|---------------------------------------------------------------|
| `PGSQL_HOST`      | PostgreSQL host                                               |
| `PGSQL_PORT`      | PostgreSQL port                                               |
| `PGSQL_USER`      | PostgreSQL user                                               |
| `PGSQL_PASSWORD`  | PostgreSQL password                                           |
| `PGSQL_DB`        | PostgreSQL database name                                      |
| `DATABASE_URL`    | Any SQLAlchemy URL; when set, used instead of `PGSQL_*`       |
| `API_AGIFY`       | Base URL of the age lookup; the name is appended to it        |
| `API_GENDERIZE`   | Base URL of the gender lookup; the name is appended to it     |
| `API_NATIONALIZE` | Base URL of the nationality lookup; the name is appended      |
| `SERVER_ADDR`     | Listen address as `host:port` or `:port`, e.g. `:8000`        |
| `PORT`            | Port used when `SERVER_ADDR` is empty (default 8080)          |
| `SERVER_DOMAIN`   | Public domain of the service, kept by the person service      |

When `SERVER_ADDR` is empty the server listens on all interfaces. The
PostgreSQL connection uses `sslmode=disable` and the UTC time zone; the
SQLAlchemy default PostgreSQL driver (psycopg2) has to be installed
separately. A SQLite `DATABASE_URL` works as well, which is convenient for
trying the service out.

The lookup services are expected to answer JSON of the forms
`{"age": 31}`, `{"gender": "male"}` and
`{"country": [{"country_id": "US"}, ...]}`; the first country is used.

An example `.env`:

```
PGSQL_HOST=localhost
PGSQL_PORT=5432
PGSQL_USER=user
PGSQL_PASSWORD=password
PGSQL_DB=persons
API_AGIFY=https://age.example.com/?name=
API_GENDERIZE=https://gender.example.com/?name=
API_NATIONALIZE=https://nationality.example.com/?name=
SERVER_ADDR=:8000
SERVER_DOMAIN=localhost
```

The `people` table and its indexes are created on start-up if they do not
exist yet.

## Running

Install the package, put a `.env` file in the working directory and start
the server:

```
persondir-server
```

The command exits with status 1 if `.env` is missing, if `SERVER_ADDR` is
malformed, or if the database cannot be set up.

## Endpoints

All routes live under `/api/v1`.

| Method   | Path                  | Purpose                                      |
|----------|-----------------------|----------------------------------------------|
| `GET`    | `/api/v1/person/`     | List people with filters and pagination      |
| `POST`   | `/api/v1/person/`     | Create a person; returns `{"id": "<uuid>"}`  |
| `PUT`    | `/api/v1/person/`     | Update fields of a person given by `id`      |
| `GET`    | `/api/v1/person/{id}` | Fetch one person, wrapped as `{"data": ...}` |
| `DELETE` | `/api/v1/person/{id}` | Delete one person                            |

A person is returned with the keys `ID`, `Name`, `Surname`, `Patronymic`,
`Age`, `Gender`, `Nationality`, `CreatedAt` and `UpdatedAt` (ISO 8601).

### Creating

Body fields: `name` and `surname` are required strings of 2 to 100
characters; `patronymic` is optional and, if not empty, also 2 to 100
characters.

### Listing

Query parameters: `name`, `surname`, `gender`, `nationality`, `min_age`,
`max_age`, `page` (default 1) and `page_size` (default 10). Ages of 0 or
less are not used as filters. A page below 1 is treated as 1, and a page
size outside 1–100 falls back to 10. The answer has the keys `Data`,
`Total`, `Page`, `PageSize` and `TotalPages`.

### Updating

Body field `id` must be a lower-case version 4 UUID. Any of `name`,
`surname`, `patronymic` (2 to 100 characters when given), `age` (0 or
more), `gender` and `nationality` may be given; fields left out, empty or
zero are not changed. Updating an id that does not exist still answers
`success`.

### Errors

Every error is answered as `{"error": "<message>"}`:

| Status | When                                                          |
|--------|---------------------------------------------------------------|
| 400    | Malformed body or query, or fetching a person fails or finds nothing |
| 500    | Creating, listing, updating or deleting fails (including deleting an unknown id) |

## Using it from Python

The application can be built without starting a server:

```python
from fastapi.testclient import TestClient

from persondir.app import build_app

app = build_app({
    "DATABASE_URL": "sqlite://",
    "API_AGIFY": "https://age.example.com/?name=",
    "API_GENDERIZE": "https://gender.example.com/?name=",
    "API_NATIONALIZE": "https://nationality.example.com/?name=",
})
client = TestClient(app)
print(client.get("/api/v1/person/").json())
app.state.database.close()
```

The building blocks can be used on their own as well:

- `persondir.database.Database` — engine, schema creation and a
  `session()` context manager; `database_url_from_env()` builds the
  PostgreSQL URL from the `PGSQL_*` variables.
- `persondir.repository.PersonRepository` — `create`, `get_by_filter`,
  `get_by_id`, `delete_by_id`, `edit`; raises `RepositoryError` and
  `PersonNotFoundError`.
- `persondir.external_api.NameMetricsFetcher` — `get_name_metrics(name)`
  returns a `NameMetrics` or raises `ExternalAPIError`.
- `persondir.service.PersonService` and `Services.from_deps(Deps(...))`.
- `persondir.api.create_app(services)` — the FastAPI application.

## What it does not do

There is no authentication, no schema migration beyond creating missing
tables, and no retrying of failed lookups.