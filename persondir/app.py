"""Application assembly and the server command."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping
from pathlib import Path

import uvicorn
from dotenv import dotenv_values
from fastapi import FastAPI

from persondir.api import create_app
from persondir.database import Database, database_url_from_env
from persondir.external_api import NameMetricsFetcher
from persondir.repository import Repositories
from persondir.service import Deps, Services

logger = logging.getLogger(__name__)

_FETCH_TIMEOUT = 5.0
_DEFAULT_PORT = 8080
_ALL_INTERFACES = "0.0.0.0"


def build_app(environ: Mapping[str, str] | None = None) -> FastAPI:
    """Wire database, services and routes from the environment.

    DATABASE_URL, when set, takes the place of the PGSQL_* variables. The
    database is kept on ``app.state.database`` so its owner can close it.
    """
    env = os.environ if environ is None else environ
    url = env.get("DATABASE_URL") or database_url_from_env(env)
    database = Database(url)
    fetcher = NameMetricsFetcher.from_env(timeout=_FETCH_TIMEOUT, environ=env)
    services = Services.from_deps(
        Deps(
            repo=Repositories.from_database(database),
            fetcher=fetcher,
            domain=env.get("SERVER_DOMAIN", ""),
        )
    )
    app = create_app(services)
    app.state.database = database
    return app


def _listen_address(address: str, env: Mapping[str, str]) -> tuple[str, int]:
    if not address:
        return _ALL_INTERFACES, int(env.get("PORT") or _DEFAULT_PORT)
    host, separator, port = address.rpartition(":")
    if not separator or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}")
    return host.strip("[]") or _ALL_INTERFACES, int(port)


def _load_environment(env_file: Path) -> dict[str, str]:
    env = {key: value for key, value in dotenv_values(env_file).items() if value is not None}
    env.update(os.environ)
    return env


def main(argv: list[str] | None = None) -> int:
    """Run the HTTP server configured by ./.env and the environment."""
    parser = argparse.ArgumentParser(
        prog="persondir", description="Run the person directory HTTP server."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    env_file = Path(".env")
    if not env_file.is_file():
        logger.critical("open %s: no such file", env_file)
        raise SystemExit(1)
    env = _load_environment(env_file)

    try:
        host, port = _listen_address(env.get("SERVER_ADDR", ""), env)
        app = build_app(env)
    except Exception as exc:
        logger.critical("%s", exc)
        raise SystemExit(1) from exc

    try:
        uvicorn.run(app, host=host, port=port)
    finally:
        app.state.database.close()
    return 0