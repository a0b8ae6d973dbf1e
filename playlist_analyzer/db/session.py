"""
SQLModel engine and session helpers.

In-memory SQLite URLs share a single connection (StaticPool) so that every
thread of the executor sees the same database. Sessions on such an engine
must be serialized with `engine_lock`.
"""
import logging
import threading
import weakref
from contextlib import AbstractContextManager, nullcontext
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from ..config import get_settings

logger = logging.getLogger(__name__)

# one lock per engine whose pool hands the same connection to every thread
_shared_connection_locks: "weakref.WeakKeyDictionary[Engine, threading.Lock]" = weakref.WeakKeyDictionary()
_locks_guard = threading.Lock()


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in database_url


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def engine_lock(engine: Engine) -> AbstractContextManager:
    """
    Context manager to hold around every session opened on `engine`.

    With a StaticPool all threads share one sqlite3 connection, so two open
    sessions would commit and roll back each other's transactions. Engines
    with a real pool give each session its own connection and are not locked.
    """
    if not isinstance(engine.pool, StaticPool):
        return nullcontext()
    with _locks_guard:
        lock = _shared_connection_locks.get(engine)
        if lock is None:
            lock = _shared_connection_locks[engine] = threading.Lock()
    return lock


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine(get_settings().database_url)


def init_db(engine: Optional[Engine] = None) -> None:
    """Create the videos and video_analyses tables when missing."""
    from .. import models  # noqa: F401  (registers the tables on SQLModel.metadata)

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    logger.info("Database ready: %s", engine.url.render_as_string(hide_password=True))
