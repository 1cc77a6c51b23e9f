"""Fold raw import records into an authoritative catalog.

Records are processed in order. The first record of a YouTube id creates the
hit; later records with the same id add pack memberships and, when their values
disagree, go through the configured :class:`ResolutionPolicy`. Ids of hits and
packs already present in a prior catalog are reused so identities stay stable
across rebuilds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from hitcatalog.domain.errors import ImportCancelledError
from hitcatalog.domain.identity import ByYtId, Catalog
from hitcatalog.domain.importing.conflicts import (
    Cancel,
    ConflictSet,
    FieldConflict,
    keep_existing,
)
from hitcatalog.domain.importing.records import interpret_record
from hitcatalog.domain.model import Hit, HitField, Pack, new_id, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from hitcatalog.domain.importing.conflicts import FieldValue, ResolutionPolicy
    from hitcatalog.domain.importing.records import ImportRecord, RawRecord

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportResult:
    """Outcome of one merge run."""

    catalog: Catalog
    read: int = 0
    skipped: int = 0
    conflicts: int = 0
    new_hits: int = 0
    reused_ids: int = 0


class ImportMerger:
    def __init__(
        self,
        *,
        prior: Catalog | None = None,
        policy: ResolutionPolicy = keep_existing,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._prior = prior or Catalog.empty()
        self._policy = policy
        self._clock = clock

    def merge(self, records: Iterable[RawRecord]) -> ImportResult:
        """Merge ``records`` into a new catalog.

        Raises ``InvalidRecordError`` for unusable input and ``ImportCancelledError``
        when the policy cancels; in both cases no catalog is returned.
        """

        now = self._clock()
        result = ImportResult(catalog=Catalog.empty())
        packs_by_name: dict[str, Pack] = {}

        for raw in records:
            result.read += 1
            record = interpret_record(raw)
            if record is None or record.is_placeholder:
                result.skipped += 1
                continue

            pack = self._resolve_pack(record.pack, packs_by_name, result.catalog, now)
            hit = result.catalog.get_hit(ByYtId(record.yt_id))
            if hit is None:
                hit = self._new_hit(record, now, result)
                result.catalog.insert_hit(hit)
            else:
                self._merge_into(hit, record, result)
            hit.add_pack(pack.id)

        self._propagate_timestamps(result.catalog)
        log.info(
            "Merged %s records into %s hits and %s packs (skipped=%s, conflicts=%s, new=%s)",
            result.read,
            len(result.catalog),
            len(packs_by_name),
            result.skipped,
            result.conflicts,
            result.new_hits,
        )
        return result

    def _resolve_pack(
        self,
        name: str,
        packs_by_name: dict[str, Pack],
        catalog: Catalog,
        now: datetime,
    ) -> Pack:
        pack = packs_by_name.get(name)
        if pack is not None:
            return pack
        previous = self._prior.find_pack_by_name(name)
        if previous is not None:
            pack = Pack(id=previous.id, name=name, last_modified=previous.last_modified)
        else:
            pack = Pack(name=name, last_modified=now)
            log.debug("Minted new pack %s (%s)", name, pack.id)
        packs_by_name[name] = pack
        catalog.insert_pack(pack)
        return pack

    def _new_hit(self, record: ImportRecord, now: datetime, result: ImportResult) -> Hit:
        previous = self._prior.get_hit(ByYtId(record.yt_id))
        if previous is not None:
            hit_id = previous.id
            result.reused_ids += 1
        else:
            hit_id = new_id()
            result.new_hits += 1
            log.debug("New hit %s: %s (%s)", record.artist, record.title, hit_id)
        return Hit(
            id=hit_id,
            yt_id=record.yt_id,
            artist=record.artist,
            title=record.title,
            year=record.year,
            playback_offset=record.playback_offset,
            belongs_to=record.belongs_to,
            last_modified=now,
        )

    def _merge_into(self, hit: Hit, record: ImportRecord, result: ImportResult) -> None:
        belongs_to = record.belongs_to
        if not hit.belongs_to and belongs_to:
            hit.belongs_to = belongs_to
        elif hit.belongs_to and not belongs_to:
            belongs_to = hit.belongs_to

        conflicts = _differences(hit, record, belongs_to)
        if not conflicts:
            return

        result.conflicts += 1
        conflict_set = ConflictSet(
            hit_id=hit.id,
            yt_id=hit.yt_id,
            label=f"{hit.artist}: {hit.title}",
            conflicts=conflicts,
            line=record.line,
        )
        log.info(
            "Hit difference spotted for %s (%s) on %s",
            conflict_set.label,
            hit.yt_id,
            ", ".join(conflict_set.fields),
        )
        decision = self._policy(conflict_set)
        if isinstance(decision, Cancel):
            raise ImportCancelledError(decision.reason or f"cancelled at {conflict_set.label}")
        _apply_values(hit, conflict_set.validate(decision))

    def _propagate_timestamps(self, catalog: Catalog) -> None:
        # Unchanged hits keep the timestamp they shipped with last time.
        for hit in catalog.hits():
            previous = self._prior.get_hit(ByYtId(hit.yt_id))
            if previous is not None and hit.same_content(previous):
                hit.last_modified = previous.last_modified


def _differences(hit: Hit, record: ImportRecord, belongs_to: str) -> tuple[FieldConflict, ...]:
    pairs: tuple[tuple[HitField, FieldValue, FieldValue], ...] = (
        (HitField.TITLE, hit.title, record.title),
        (HitField.ARTIST, hit.artist, record.artist),
        (HitField.YEAR, hit.year, record.year),
        (HitField.BELONGS_TO, hit.belongs_to, belongs_to),
        (HitField.PLAYBACK_OFFSET, hit.playback_offset, record.playback_offset),
    )
    return tuple(
        FieldConflict(field=name, existing=existing, incoming=incoming)
        for name, existing, incoming in pairs
        if _fold(existing) != _fold(incoming)
    )


def _fold(value: FieldValue) -> FieldValue:
    return value.lower() if isinstance(value, str) else value


def _apply_values(hit: Hit, values: dict[HitField, FieldValue]) -> None:
    for name, value in values.items():
        setattr(hit, name.value, value)
