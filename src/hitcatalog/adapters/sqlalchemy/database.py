"""Process-wide SQLAlchemy engine used by the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event

from hitcatalog.config import get_database_config

from .mappings import create_all_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before or after initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None


_STATE = _AdapterState()


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Make sqlite honour ``ON DELETE CASCADE`` on every new connection."""

    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:  # pyright: ignore[reportUnusedFunction]
        _ = connection_record
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the SQLAlchemy engine and make sure the schema exists."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if _STATE.engine is not None and _STATE.engine is not engine:
        shutdown()

    if engine is None:
        engine = create_engine(database_uri or get_database_config().uri)
        enable_sqlite_foreign_keys(engine)
    create_all_tables(engine)

    _STATE.engine = engine
    return engine


def configured_engine() -> Engine:
    """Return the engine currently managed by the adapter."""

    if _STATE.engine is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call hitcatalog.adapters.sqlalchemy."
            "startup() before opening the store."
        )
    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
