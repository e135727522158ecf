"""Database engines and session factory.

Request handlers and services work with the synchronous ``SessionLocal``;
the async engine is only used at startup to create the tables. A local
SQLite database takes over in development when PostgreSQL is unreachable.
"""

from __future__ import annotations

import logging
import os
import ssl
import time
from typing import Any, Dict, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./content_studio_local.db"
_FALLBACK_ENVIRONMENTS = ("development", "local")
_SLOW_QUERY_SNIPPET_CHARS = 200

# Populated by ``configure_database``.
async_engine: AsyncEngine
sync_engine: Engine
SessionLocal: sessionmaker


def _ssl_context(verify: bool, check_hostname: bool) -> ssl.SSLContext:
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    context.check_hostname = check_hostname
    if not verify:
        context.verify_mode = ssl.CERT_NONE
    return context


def split_ssl_mode(url: str) -> Tuple[str, Dict[str, Any]]:
    """asyncpg rejects libpq's ``sslmode`` query parameter; turn it into ``connect_args``."""

    try:
        parsed = make_url(url)
    except ArgumentError:
        return url, {}
    if parsed.drivername != "postgresql+asyncpg" or "sslmode" not in parsed.query:
        return url, {}

    query = dict(parsed.query)
    mode = str(query.pop("sslmode")).lower()
    cleaned = parsed.set(query=query).render_as_string(hide_password=False)

    if mode == "disable":
        return cleaned, {"ssl": False}
    if mode in ("verify-ca", "verify-full"):
        return cleaned, {"ssl": _ssl_context(verify=True, check_hostname=mode == "verify-full")}
    if mode in ("allow", "prefer", "require"):
        # libpq semantics: encrypted, certificate not checked
        return cleaned, {"ssl": _ssl_context(verify=False, check_hostname=False)}
    return cleaned, {}


def sync_url_for(async_url: str) -> Tuple[str, Dict[str, Any]]:
    """Blocking counterpart of an async URL: default PostgreSQL driver, plain sqlite."""

    try:
        parsed = make_url(async_url)
    except ArgumentError:
        return async_url.replace("+asyncpg", ""), {}

    backend, _, driver = parsed.drivername.partition("+")
    if backend == "postgresql" and driver:
        return parsed.set(drivername="postgresql").render_as_string(hide_password=False), {}
    if backend == "sqlite" and driver == "aiosqlite":
        sync = parsed.set(drivername="sqlite").render_as_string(hide_password=False)
        return sync, {"check_same_thread": False}
    return parsed.render_as_string(hide_password=False), {}


def sqlite_fallback_allowed() -> bool:
    if os.getenv("DISABLE_SQLITE_FALLBACK") == "1":
        return False
    return (settings.ENVIRONMENT or "").lower() in _FALLBACK_ENVIRONMENTS


def log_slow_queries(engine: Engine, threshold_ms: int) -> None:
    """Emit a warning for every statement slower than ``threshold_ms`` (0 disables)."""

    if threshold_ms <= 0:
        return

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_started_at", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _stop_timer(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.get("query_started_at")
        if not started:
            return
        elapsed_ms = (time.perf_counter() - started.pop()) * 1000
        if elapsed_ms >= threshold_ms:
            compact = " ".join(str(statement).split())[:_SLOW_QUERY_SNIPPET_CHARS]
            logger.warning("Slow SQL (%.1f ms): %s", elapsed_ms, compact)


def configure_database(database_url: str | None = None, *, allow_fallback: bool = True) -> None:
    """Build both engines and the session factory, checking the connection eagerly.

    ``database_url`` defaults to ``settings.DATABASE_URL``. In development an
    unreachable database is replaced by the local SQLite file.
    """

    global async_engine, sync_engine, SessionLocal

    url, async_args = split_ssl_mode(str(database_url or settings.DATABASE_URL))
    logger.info("Configuring database: %s", make_url(url).render_as_string(hide_password=True))

    new_async = create_async_engine(url, future=True, connect_args=async_args)
    blocking_url, blocking_args = sync_url_for(url)
    new_sync = create_engine(blocking_url, pool_pre_ping=True, connect_args=blocking_args)

    try:
        with new_sync.connect() as connection:
            connection.execute(text("SELECT 1"))
    except (OperationalError, OSError) as exc:
        new_sync.dispose()
        new_async.sync_engine.dispose()
        if not (allow_fallback and sqlite_fallback_allowed()):
            logger.error("Database connection failed: %s", exc)
            raise
        logger.warning("Database unreachable (%s), switching to %s", exc, SQLITE_FALLBACK_URL)
        configure_database(SQLITE_FALLBACK_URL, allow_fallback=False)
        return

    log_slow_queries(new_sync, settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS or 0)
    async_engine, sync_engine = new_async, new_sync
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


configure_database()


# FastAPI dependency yielding a synchronous session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
