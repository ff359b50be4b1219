"""HTTP interface of the person directory."""

from __future__ import annotations

import json
import logging
import re
import uuid
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from persondir.domain import Person, PersonQuery
from persondir.service import NewPersonCreate, Services

logger = logging.getLogger(__name__)

_UUID4 = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_MIN_LENGTH = 2
_MAX_LENGTH = 100
_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}


def _check_optional_length(value: str) -> str:
    if value and not _MIN_LENGTH <= len(value) <= _MAX_LENGTH:
        raise ValueError(f"length must be between {_MIN_LENGTH} and {_MAX_LENGTH}")
    return value


class NewPersonInput(BaseModel):
    """Body of a request that registers a person."""

    model_config = ConfigDict(strict=True)

    name: str = Field(min_length=_MIN_LENGTH, max_length=_MAX_LENGTH)
    surname: str = Field(min_length=_MIN_LENGTH, max_length=_MAX_LENGTH)
    patronymic: str = ""

    @field_validator("patronymic", mode="before")
    @classmethod
    def _null_patronymic(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("patronymic")
    @classmethod
    def _patronymic_length(cls, value: str) -> str:
        return _check_optional_length(value)


class UpdatePersonInput(BaseModel):
    """Body of a request that edits a person; empty fields are left unchanged."""

    model_config = ConfigDict(strict=True)

    id: str
    name: str = ""
    surname: str = ""
    patronymic: str = ""
    age: int = Field(0, ge=0)
    gender: str = ""
    nationality: str = ""

    @field_validator("name", "surname", "patronymic", "gender", "nationality", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("age", mode="before")
    @classmethod
    def _null_age(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("id")
    @classmethod
    def _id_is_uuid4(cls, value: str) -> str:
        if not _UUID4.fullmatch(value):
            raise ValueError("id must be a version 4 UUID")
        return value

    @field_validator("name", "surname", "patronymic")
    @classmethod
    def _text_length(cls, value: str) -> str:
        return _check_optional_length(value)


class CreatePersonResponse(BaseModel):
    """Answer to a successful registration."""

    id: str


class SimpleMessageResponse(BaseModel):
    """Answer carrying a short message."""

    message: str


class ErrorResponse(BaseModel):
    """Answer describing a failure."""

    error: str


class _Failure(Exception):
    def __init__(self, status_code: int, message: str, detail: object) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.detail = detail


async def _failure_response(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, _Failure)
    logger.error("%s", exc.detail)
    return JSONResponse(
        ErrorResponse(error=exc.message).model_dump(), status_code=exc.status_code
    )


async def _cors(request: Request, call_next: Any) -> Response:
    if request.method == "OPTIONS":
        return Response(
            status_code=200, headers={**_CORS_HEADERS, "Content-Type": "application/json"}
        )
    response = await call_next(request)
    response.headers.update(_CORS_HEADERS)
    response.headers.setdefault("Content-Type", "application/json")
    return response


async def _bind_json(request: Request, model: type[BaseModel]) -> Any:
    body = await request.body()
    try:
        return model.model_validate(json.loads(body))
    except (ValueError, ValidationError) as exc:
        raise _Failure(400, "invalid input body", exc) from exc


def _query_from_params(request: Request) -> PersonQuery:
    params = request.query_params

    def text(key: str) -> str:
        values = params.getlist(key)
        return values[0] if values else ""

    def number(key: str, default: int) -> int:
        raw = text(key)
        if raw == "":
            return default
        if not _INTEGER.fullmatch(raw):
            raise _Failure(400, "invalid query parameters", f"{key}: invalid integer {raw!r}")
        return int(raw)

    return PersonQuery(
        name=text("name"),
        surname=text("surname"),
        gender=text("gender"),
        nationality=text("nationality"),
        min_age=number("min_age", 0),
        max_age=number("max_age", 0),
        page=number("page", 1),
        page_size=number("page_size", 10),
    )


def _person_router(services: Services) -> APIRouter:
    router = APIRouter(prefix="/person", tags=["Person"])
    people = services.person

    @router.get("/")
    async def get_person_data(request: Request) -> JSONResponse:
        """List people with filtering and pagination."""
        query = _query_from_params(request)
        try:
            result = await run_in_threadpool(people.get_with_filter, query)
        except Exception as exc:
            raise _Failure(500, "failed to fetch persons", exc) from exc
        return JSONResponse(result.to_dict())

    @router.get("/{person_id}")
    async def get_person_by_id(person_id: str) -> JSONResponse:
        """Return one person."""
        if not person_id:
            raise _Failure(400, "id is required", "empty id in path")
        try:
            person = await run_in_threadpool(people.get_by_id, person_id)
        except Exception as exc:
            raise _Failure(400, "failed to find a person", exc) from exc
        return JSONResponse({"data": person.to_dict()})

    @router.post("/")
    async def create_new_person(request: Request) -> JSONResponse:
        """Register a person, enriched with name estimates."""
        data = await _bind_json(request, NewPersonInput)
        new_person = NewPersonCreate(
            name=data.name, surname=data.surname, patronymic=data.patronymic
        )
        try:
            person_id = await run_in_threadpool(people.add, new_person)
        except Exception as exc:
            raise _Failure(500, "failed to create", exc) from exc
        return JSONResponse(CreatePersonResponse(id=person_id).model_dump())

    @router.put("/")
    async def update_person(request: Request) -> JSONResponse:
        """Edit the non-empty fields of a person."""
        data = await _bind_json(request, UpdatePersonInput)
        try:
            key = uuid.UUID(data.id)
        except ValueError as exc:
            raise _Failure(400, "invalid type of id", exc) from exc
        edited = Person(
            id=key,
            name=data.name,
            surname=data.surname,
            patronymic=data.patronymic,
            age=data.age,
            gender=data.gender,
            nationality=data.nationality,
        )
        try:
            await run_in_threadpool(people.edit, edited)
        except Exception as exc:
            raise _Failure(500, "failed to update person", exc) from exc
        return JSONResponse(SimpleMessageResponse(message="success").model_dump())

    @router.delete("/{person_id}")
    async def delete_person_by_id(person_id: str) -> JSONResponse:
        """Remove a person."""
        if not person_id:
            raise _Failure(400, "id is required", "empty id in path")
        try:
            await run_in_threadpool(people.delete_by_id, person_id)
        except Exception as exc:
            raise _Failure(500, "failed to delete person", exc) from exc
        return JSONResponse(SimpleMessageResponse(message="success").model_dump())

    return router


def create_app(services: Services) -> FastAPI:
    """Build the web application serving ``/api/v1/person`` and the API docs."""
    app = FastAPI(
        title="Person directory",
        version="1.0",
        description="REST API of the person directory",
        docs_url="/swagger/index.html",
        openapi_url="/swagger/doc.json",
        redoc_url=None,
    )
    app.middleware("http")(_cors)
    app.add_exception_handler(_Failure, _failure_response)

    v1 = APIRouter(prefix="/v1")
    v1.include_router(_person_router(services))
    api = APIRouter(prefix="/api")
    api.include_router(v1)
    app.include_router(api)
    return app