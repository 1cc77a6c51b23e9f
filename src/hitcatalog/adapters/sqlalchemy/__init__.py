"""SQLAlchemy adapter package for the persisted hit store."""

from __future__ import annotations

from .database import (
    StartupError,
    configured_engine,
    enable_sqlite_foreign_keys,
    is_started,
    shutdown,
    startup,
)
from .mappings import create_all_tables, hits_packs_table, hits_table, metadata, packs_table
from .store import SqlAlchemyCatalogStore

__all__ = [
    "SqlAlchemyCatalogStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "enable_sqlite_foreign_keys",
    "hits_packs_table",
    "hits_table",
    "is_started",
    "metadata",
    "packs_table",
    "shutdown",
    "startup",
]
