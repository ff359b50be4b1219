"""Database connection setup."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from persondir.domain import Base

logger = logging.getLogger(__name__)


def database_url_from_env(environ: Mapping[str, str] | None = None) -> str:
    """Build the PostgreSQL URL from the PGSQL_* variables."""
    env = os.environ if environ is None else environ
    port = env.get("PGSQL_PORT") or None
    url = URL.create(
        "postgresql",
        username=env.get("PGSQL_USER") or None,
        password=env.get("PGSQL_PASSWORD") or None,
        host=env.get("PGSQL_HOST") or None,
        port=int(port) if port else None,
        database=env.get("PGSQL_DB") or None,
        query={"sslmode": "disable", "options": "-c TimeZone=UTC"},
    )
    return url.render_as_string(hide_password=False)


class Database:
    """An engine with its schema created and a session factory."""

    def __init__(self, url: str | URL) -> None:
        parsed = make_url(url)
        options: dict[str, Any] = {}
        if parsed.get_backend_name() == "sqlite":
            options["connect_args"] = {"check_same_thread": False}
            if parsed.database in (None, "", ":memory:"):
                options["poolclass"] = StaticPool
        self.engine = create_engine(parsed, **options)
        Base.metadata.create_all(self.engine)
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)
        logger.info("connected to %s database", parsed.get_backend_name())

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        with self._sessions() as session:
            try:
                yield session
                session.commit()
            except BaseException:
                session.rollback()
                raise

    def close(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()