"""SQLAlchemy Core tables of the persisted hit store.

sqlite stores timezone-aware datetimes without their offset, so every
timestamp goes through :class:`UTCDateTime` and comes back as UTC.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
    false,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _flag(name: str) -> Column[bool]:
    return Column(name, Boolean, nullable=False, default=False, server_default=false())


hits_table = Table(
    "hits",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("title", String, nullable=False),
    Column("artist", String, nullable=False),
    Column("yt_id", String, nullable=False, index=True),
    Column("year", Integer, nullable=False),
    Column("playback_offset", Integer, nullable=False, default=0),
    Column("belongs_to", String, nullable=False, default=""),
    Column("last_modified", UTCDateTime, nullable=False),
    _flag("downloaded"),
    _flag("custom"),
    _flag("marked_for_deletion"),
)

packs_table = Table(
    "packs",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("name", String, nullable=False),
    Column("last_modified", UTCDateTime, nullable=False),
    _flag("custom"),
    _flag("marked_for_deletion"),
)

hits_packs_table = Table(
    "hits_packs",
    metadata,
    Column(
        "hit_id", UUIDColumnType, ForeignKey("hits.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "pack_id", UUIDColumnType, ForeignKey("packs.id", ondelete="CASCADE"), primary_key=True
    ),
    _flag("custom"),
    _flag("marked_for_deletion"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the store metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
