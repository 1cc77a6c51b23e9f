"""Persisted-store rows as seen by the reconciliation engine.

The store keeps two pieces of state the catalog does not know about: whether a
row was created directly in the store (``custom``) and whether it is pending
removal (``marked_for_deletion``). Both are carried as one explicit
:class:`RowState` so the "never touch custom rows" rule has a single place to
be checked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hitcatalog.domain.model.enums import RowOrigin, RowStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class RowState:
    origin: RowOrigin = RowOrigin.CATALOG
    status: RowStatus = RowStatus.ACTIVE

    @classmethod
    def from_flags(cls, *, custom: bool, marked_for_deletion: bool) -> RowState:
        return cls(
            origin=RowOrigin.CUSTOM if custom else RowOrigin.CATALOG,
            status=RowStatus.MARKED_FOR_DELETION if marked_for_deletion else RowStatus.ACTIVE,
        )

    @property
    def custom(self) -> bool:
        return self.origin is RowOrigin.CUSTOM

    @property
    def marked_for_deletion(self) -> bool:
        return self.status is RowStatus.MARKED_FOR_DELETION


@dataclass(frozen=True, slots=True, kw_only=True)
class StoredPack:
    id: UUID
    name: str
    last_modified: datetime
    state: RowState = field(default_factory=RowState)


@dataclass(frozen=True, slots=True, kw_only=True)
class StoredHit:
    id: UUID
    yt_id: str
    last_modified: datetime
    state: RowState = field(default_factory=RowState)


@dataclass(frozen=True, slots=True, kw_only=True)
class StoredHitPack:
    hit_id: UUID
    pack_id: UUID
    state: RowState = field(default_factory=RowState)
