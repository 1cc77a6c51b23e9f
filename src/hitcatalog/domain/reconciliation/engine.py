"""Catalog sync engine: bring the persisted store in line with the catalog.

The engine never discards what users did in the store. Rows flagged custom are
never updated or deleted, soft-deletion markers survive re-inserts, and a hit
that was stored under a stale id is replaced by the catalog id while keeping
its pack associations.

Staleness is decided by ``last_modified`` alone with a strict ``<``: a store
row with the same timestamp as the catalog is considered current.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hitcatalog.domain.identity import ById, ByYtId
from hitcatalog.domain.model import RowState, RowStatus
from hitcatalog.domain.ports import never_downloaded

from .apply import apply_sync_plan
from .plan import (
    DeleteHit,
    DeleteHitPack,
    DeletePack,
    InsertHit,
    InsertHitPack,
    InsertPack,
    StoreSnapshot,
    SyncPlan,
    UpdateHit,
    UpdatePack,
)

if TYPE_CHECKING:
    from uuid import UUID

    from hitcatalog.domain.identity import Catalog, HitKey, IdentityIndex
    from hitcatalog.domain.model import Hit, StoredHit, StoredHitPack
    from hitcatalog.domain.ports import CatalogStore, DownloadProbe

    from .apply import SyncResult

log = logging.getLogger(__name__)


def plan_catalog_sync(
    catalog: Catalog,
    snapshot: StoreSnapshot,
    *,
    is_downloaded: DownloadProbe = never_downloaded,
) -> SyncPlan:
    """Compute the minimal writes that reconcile ``snapshot`` with ``catalog``."""

    planner = _SyncPlanner(catalog=catalog, snapshot=snapshot, is_downloaded=is_downloaded)
    planner.plan_packs()
    planner.plan_hits()
    return planner.plan


@dataclass(slots=True)
class _SyncPlanner:
    catalog: Catalog
    snapshot: StoreSnapshot
    is_downloaded: DownloadProbe
    plan: SyncPlan = field(default_factory=SyncPlan)
    deleted_packs: set[UUID] = field(default_factory=set["UUID"])
    removed_hits: set[UUID] = field(default_factory=set["UUID"])

    def plan_packs(self) -> None:
        stored = self.snapshot.packs_by_id()
        for pack in self.catalog.packs():
            row = stored.get(pack.id)
            if row is None:
                self.plan.add(
                    InsertPack(pack),
                    description=f"Inserting new pack {pack.name} ({pack.id})",
                )
            elif row.last_modified < pack.last_modified:
                if row.state.custom:
                    log.debug("Keeping custom pack %s (%s)", row.name, row.id)
                    continue
                self.plan.add(
                    UpdatePack(pack, row),
                    description=(
                        f"Updating pack {pack.name} ({pack.id}) "
                        f"(old {row.last_modified}, new {pack.last_modified})"
                    ),
                )

        anchored = self._packs_with_custom_associations()
        for row in self.snapshot.packs:
            if row.state.custom or self.catalog.get_pack(row.id) is not None:
                continue
            if row.id in anchored:
                log.debug(
                    "Keeping pack %s (%s) referenced by custom associations", row.name, row.id
                )
                continue
            self.plan.add(DeletePack(row), description=f"Deleting old pack {row.name} ({row.id})")
            self.deleted_packs.add(row.id)

    def _packs_with_custom_associations(self) -> set[UUID]:
        """Packs a surviving custom association points at.

        A pack delete cascades to its associations, so these packs stay. A hit
        survives when it is custom or known to the catalog by id. Duplicates
        replaced by a new catalog hit count too, their associations move over.
        """

        stored_ids = {row.id for row in self.snapshot.hits}
        surviving: set[UUID] = set()
        for row in self.snapshot.hits:
            if row.state.custom or self.catalog.contains_hit(ById(row.id)):
                surviving.add(row.id)
                continue
            replacement = self.catalog.get_hit(ByYtId(row.yt_id))
            if replacement is not None and replacement.id not in stored_ids:
                surviving.add(row.id)
        return {
            association.pack_id
            for association in self.snapshot.hit_packs
            if association.state.custom and association.hit_id in surviving
        }

    def plan_hits(self) -> None:
        rows = self.snapshot.hit_index()
        associations = self.snapshot.hit_packs_by_hit()

        for hit in self.catalog.hits():
            row = rows.get(ById(hit.id))
            if row is None:
                self._plan_new_hit(hit, rows, associations)
            else:
                self._plan_existing_hit(hit, row, associations.get(hit.id, []))

        for row in self.snapshot.hits:
            if row.state.custom or row.id in self.removed_hits:
                continue
            if self.catalog.contains_hit(ById(row.id)):
                continue
            self.plan.add(DeleteHit(row), description=f"Deleting old hit {row.id}")
            self.removed_hits.add(row.id)

    def _plan_new_hit(
        self,
        hit: Hit,
        rows: IdentityIndex[HitKey, StoredHit],
        associations: dict[UUID, list[StoredHitPack]],
    ) -> None:
        duplicates = self._accidental_duplicates(hit, rows)
        status = duplicates[0].state.status if duplicates else RowStatus.ACTIVE
        insert = InsertHit(
            hit=hit,
            downloaded=self.is_downloaded(hit),
            state=RowState(status=status),
        )

        if duplicates:
            stale_ids = ", ".join(str(row.id) for row in duplicates)
            self.plan.add(
                *(DeleteHit(row) for row in duplicates),
                insert,
                description=(
                    f"Replacing accidental duplicate {stale_ids} "
                    f"(same yt id as {hit.artist}: {hit.title} ({hit.id}))"
                ),
            )
            self.removed_hits.update(row.id for row in duplicates)
        else:
            self.plan.add(
                insert,
                description=f"Insert new hit {hit.artist}: {hit.title} ({hit.id})",
            )

        # New row: the union of carried-over and catalog memberships, nothing to prune.
        memberships: dict[UUID, RowState] = {}
        for duplicate in duplicates:
            for association in associations.get(duplicate.id, []):
                if association.pack_id in self.deleted_packs:
                    continue
                memberships.setdefault(association.pack_id, association.state)
        for pack_id in hit.packs:
            memberships.setdefault(pack_id, RowState())

        for pack_id, state in memberships.items():
            self.plan.add(
                InsertHitPack(hit.id, pack_id, state),
                description=(
                    f"Insert association of hit {hit.artist}: {hit.title} ({hit.id}) "
                    f"with pack {pack_id} (custom: {state.custom})"
                ),
            )

    def _accidental_duplicates(
        self,
        hit: Hit,
        rows: IdentityIndex[HitKey, StoredHit],
    ) -> list[StoredHit]:
        """Non-custom rows holding this hit's YouTube id under an id the catalog lost."""

        duplicates: list[StoredHit] = []
        for row in rows.get_all(ByYtId(hit.yt_id)):
            if row.id == hit.id or row.id in self.removed_hits:
                continue
            if self.catalog.contains_hit(ById(row.id)):
                continue
            if row.state.custom:
                log.debug("Keeping custom hit %s sharing yt id %s", row.id, hit.yt_id)
                continue
            duplicates.append(row)
        return duplicates

    def _plan_existing_hit(
        self,
        hit: Hit,
        row: StoredHit,
        associations: list[StoredHitPack],
    ) -> None:
        if row.state.custom:
            log.debug("Keeping custom hit %s: %s (%s)", hit.artist, hit.title, hit.id)
            return

        if row.last_modified < hit.last_modified:
            self.plan.add(
                UpdateHit(hit, row),
                description=(
                    f"Updating hit {hit.artist}: {hit.title} ({hit.id}) "
                    f"(old {row.last_modified}, new {hit.last_modified})"
                ),
            )

        stored_packs = {association.pack_id for association in associations}
        for pack_id in hit.packs:
            if pack_id in stored_packs:
                continue
            self.plan.add(
                InsertHitPack(hit.id, pack_id),
                description=(
                    f"Insert new association of hit {hit.artist}: {hit.title} ({hit.id}) "
                    f"with pack {pack_id}"
                ),
            )

        for association in associations:
            if association.state.custom or association.pack_id in hit.packs:
                continue
            if association.pack_id in self.deleted_packs:
                # Removed together with the pack.
                continue
            self.plan.add(
                DeleteHitPack(association),
                description=(
                    f"Delete dangling association from hit {hit.artist}: {hit.title} "
                    f"({hit.id}) to pack {association.pack_id}"
                ),
            )


@dataclass(slots=True)
class CatalogSyncEngine:
    """Read the store, plan the reconciliation and apply it best effort."""

    store: CatalogStore
    is_downloaded: DownloadProbe = never_downloaded

    def sync(self, catalog: Catalog) -> SyncResult:
        snapshot = self.store.snapshot()
        log.debug(
            "Loaded %s packs, %s hits and %s hit to pack associations from the store",
            len(snapshot.packs),
            len(snapshot.hits),
            len(snapshot.hit_packs),
        )
        plan = plan_catalog_sync(catalog, snapshot, is_downloaded=self.is_downloaded)
        log.info("Planned %s writes in %s steps", len(plan), len(plan.steps))
        return apply_sync_plan(plan, self.store)
