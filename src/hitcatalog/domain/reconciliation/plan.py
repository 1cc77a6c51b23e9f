"""Sync plan types shared by the planner, the applier and store adapters.

The plan is the contract between reading the store (a :class:`StoreSnapshot`),
deciding what has to change (``engine``) and writing it back (``apply`` plus a
:class:`~hitcatalog.domain.ports.CatalogStore`). Every write is an explicit
mutation value, grouped into steps that a store applies atomically.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from hitcatalog.domain.errors import ProtectedRowError
from hitcatalog.domain.identity import ById, ByYtId, HitKey, IdentityIndex
from hitcatalog.domain.model import RowState, StoredHit, StoredHitPack, StoredPack

if TYPE_CHECKING:
    from uuid import UUID

    from hitcatalog.domain.model import Hit, Pack


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    """Current rows of the persisted store."""

    hits: tuple[StoredHit, ...] = ()
    packs: tuple[StoredPack, ...] = ()
    hit_packs: tuple[StoredHitPack, ...] = ()

    def hit_index(self) -> IdentityIndex[HitKey, StoredHit]:
        index: IdentityIndex[HitKey, StoredHit] = IdentityIndex()
        for row in self.hits:
            index.insert((ById(row.id), ByYtId(row.yt_id)), row)
        return index

    def packs_by_id(self) -> dict[UUID, StoredPack]:
        return {row.id: row for row in self.packs}

    def hit_packs_by_hit(self) -> dict[UUID, list[StoredHitPack]]:
        grouped: defaultdict[UUID, list[StoredHitPack]] = defaultdict(list)
        for row in self.hit_packs:
            grouped[row.hit_id].append(row)
        return dict(grouped)


class MutationKind(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class InsertPack:
    KIND: ClassVar[MutationKind] = MutationKind.INSERT

    pack: Pack


@dataclass(frozen=True, slots=True)
class UpdatePack:
    KIND: ClassVar[MutationKind] = MutationKind.UPDATE

    pack: Pack
    previous: StoredPack


@dataclass(frozen=True, slots=True)
class DeletePack:
    KIND: ClassVar[MutationKind] = MutationKind.DELETE

    row: StoredPack


@dataclass(frozen=True, slots=True)
class InsertHit:
    KIND: ClassVar[MutationKind] = MutationKind.INSERT

    hit: Hit
    downloaded: bool = False
    state: RowState = field(default_factory=RowState)


@dataclass(frozen=True, slots=True)
class UpdateHit:
    """Overwrite every catalog-owned column of a stale row and reset ``downloaded``."""

    KIND: ClassVar[MutationKind] = MutationKind.UPDATE

    hit: Hit
    previous: StoredHit


@dataclass(frozen=True, slots=True)
class DeleteHit:
    """Delete a hit row together with all of its pack associations."""

    KIND: ClassVar[MutationKind] = MutationKind.DELETE

    row: StoredHit


@dataclass(frozen=True, slots=True)
class InsertHitPack:
    KIND: ClassVar[MutationKind] = MutationKind.INSERT

    hit_id: UUID
    pack_id: UUID
    state: RowState = field(default_factory=RowState)


@dataclass(frozen=True, slots=True)
class DeleteHitPack:
    KIND: ClassVar[MutationKind] = MutationKind.DELETE

    row: StoredHitPack


type Mutation = (
    InsertPack | UpdatePack | DeletePack | InsertHit | UpdateHit | DeleteHit | InsertHitPack
    | DeleteHitPack
)


@dataclass(frozen=True, slots=True)
class SyncStep:
    """Mutations that must be applied together or not at all."""

    mutations: tuple[Mutation, ...]
    description: str


@dataclass(slots=True)
class SyncPlan:
    """Ordered steps of one reconciliation pass."""

    steps: list[SyncStep] = field(default_factory=list["SyncStep"])

    def add(self, *mutations: Mutation, description: str) -> None:
        for mutation in mutations:
            _guard_protected(mutation)
        self.steps.append(SyncStep(mutations=mutations, description=description))

    @property
    def mutations(self) -> tuple[Mutation, ...]:
        return tuple(mutation for step in self.steps for mutation in step.mutations)

    def count(self, kind: MutationKind) -> int:
        return sum(1 for mutation in self.mutations if mutation.KIND is kind)

    def is_empty(self) -> bool:
        return not self.steps

    def __len__(self) -> int:
        return len(self.mutations)


def _guard_protected(mutation: Mutation) -> None:
    """Reject any mutation that would change or remove a custom row."""

    if isinstance(mutation, UpdatePack | UpdateHit):
        target = mutation.previous
    elif isinstance(mutation, DeletePack | DeleteHit | DeleteHitPack):
        target = mutation.row
    else:
        return

    if not target.state.custom:
        return
    if isinstance(target, StoredHitPack):
        raise ProtectedRowError("hit pack", (target.hit_id, target.pack_id))
    raise ProtectedRowError("hit" if isinstance(target, StoredHit) else "pack", target.id)
