"""SQLAlchemy implementation of the catalog store port."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from hitcatalog.domain.errors import StoreWriteError
from hitcatalog.domain.model import RowState, StoredHit, StoredHitPack, StoredPack
from hitcatalog.domain.reconciliation import (
    DeleteHit,
    DeletePack,
    InsertHit,
    InsertHitPack,
    InsertPack,
    StoreSnapshot,
    UpdateHit,
    UpdatePack,
)

from .mappings import hits_packs_table, hits_table, packs_table

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from hitcatalog.domain.reconciliation import Mutation, SyncStep

log = logging.getLogger(__name__)


class SqlAlchemyCatalogStore:
    """Read and write hit store rows through SQLAlchemy Core.

    Every :class:`SyncStep` runs in its own transaction, so a failing step is
    rolled back on its own and leaves earlier steps committed.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def snapshot(self) -> StoreSnapshot:
        with self.engine.connect() as connection:
            hits = tuple(
                StoredHit(
                    id=row.id,
                    yt_id=row.yt_id,
                    last_modified=row.last_modified,
                    state=RowState.from_flags(
                        custom=row.custom, marked_for_deletion=row.marked_for_deletion
                    ),
                )
                for row in connection.execute(
                    select(
                        hits_table.c.id,
                        hits_table.c.yt_id,
                        hits_table.c.last_modified,
                        hits_table.c.custom,
                        hits_table.c.marked_for_deletion,
                    )
                )
            )
            packs = tuple(
                StoredPack(
                    id=row.id,
                    name=row.name,
                    last_modified=row.last_modified,
                    state=RowState.from_flags(
                        custom=row.custom, marked_for_deletion=row.marked_for_deletion
                    ),
                )
                for row in connection.execute(select(packs_table))
            )
            hit_packs = tuple(
                StoredHitPack(
                    hit_id=row.hit_id,
                    pack_id=row.pack_id,
                    state=RowState.from_flags(
                        custom=row.custom, marked_for_deletion=row.marked_for_deletion
                    ),
                )
                for row in connection.execute(select(hits_packs_table))
            )
        return StoreSnapshot(hits=hits, packs=packs, hit_packs=hit_packs)

    def write(self, step: SyncStep) -> None:
        try:
            with self.engine.begin() as connection:
                for mutation in step.mutations:
                    _execute(connection, mutation)
        except SQLAlchemyError as exc:
            raise StoreWriteError(str(exc)) from exc


def _execute(connection: Connection, mutation: Mutation) -> None:  # noqa: C901
    if isinstance(mutation, InsertPack):
        pack = mutation.pack
        connection.execute(
            insert(packs_table).values(
                id=pack.id,
                name=pack.name,
                last_modified=pack.last_modified,
                custom=False,
                marked_for_deletion=False,
            )
        )
    elif isinstance(mutation, UpdatePack):
        pack = mutation.pack
        result = connection.execute(
            update(packs_table)
            .where(packs_table.c.id == pack.id)
            .values(name=pack.name, last_modified=pack.last_modified)
        )
        if result.rowcount == 0:
            raise StoreWriteError(f"Pack {pack.id} vanished before it could be updated")
    elif isinstance(mutation, DeletePack):
        connection.execute(delete(packs_table).where(packs_table.c.id == mutation.row.id))
    elif isinstance(mutation, InsertHit):
        hit = mutation.hit
        connection.execute(
            insert(hits_table).values(
                id=hit.id,
                title=hit.title,
                artist=hit.artist,
                yt_id=hit.yt_id,
                year=hit.year,
                playback_offset=hit.playback_offset,
                belongs_to=hit.belongs_to,
                last_modified=hit.last_modified,
                downloaded=mutation.downloaded,
                custom=mutation.state.custom,
                marked_for_deletion=mutation.state.marked_for_deletion,
            )
        )
    elif isinstance(mutation, UpdateHit):
        hit = mutation.hit
        result = connection.execute(
            update(hits_table)
            .where(hits_table.c.id == hit.id)
            .values(
                title=hit.title,
                artist=hit.artist,
                yt_id=hit.yt_id,
                year=hit.year,
                playback_offset=hit.playback_offset,
                belongs_to=hit.belongs_to,
                last_modified=hit.last_modified,
                downloaded=False,
            )
        )
        if result.rowcount == 0:
            raise StoreWriteError(f"Hit {hit.id} vanished before it could be updated")
    elif isinstance(mutation, DeleteHit):
        hit_id = mutation.row.id
        connection.execute(delete(hits_packs_table).where(hits_packs_table.c.hit_id == hit_id))
        connection.execute(delete(hits_table).where(hits_table.c.id == hit_id))
    elif isinstance(mutation, InsertHitPack):
        connection.execute(
            insert(hits_packs_table).values(
                hit_id=mutation.hit_id,
                pack_id=mutation.pack_id,
                custom=mutation.state.custom,
                marked_for_deletion=mutation.state.marked_for_deletion,
            )
        )
    else:
        connection.execute(
            delete(hits_packs_table).where(
                hits_packs_table.c.hit_id == mutation.row.hit_id,
                hits_packs_table.c.pack_id == mutation.row.pack_id,
            )
        )
