"""Reconciliation of the authoritative catalog into the persisted store.

Flow of one pass:
1) read the current store rows into a ``StoreSnapshot``
2) plan the minimal mutations (``plan_catalog_sync``)
3) apply them step by step, best effort (``apply_sync_plan``)
"""

from __future__ import annotations

from .apply import SyncResult, apply_sync_plan
from .engine import CatalogSyncEngine, plan_catalog_sync
from .plan import (
    DeleteHit,
    DeleteHitPack,
    DeletePack,
    InsertHit,
    InsertHitPack,
    InsertPack,
    Mutation,
    MutationKind,
    StoreSnapshot,
    SyncPlan,
    SyncStep,
    UpdateHit,
    UpdatePack,
)

__all__ = [
    "CatalogSyncEngine",
    "DeleteHit",
    "DeleteHitPack",
    "DeletePack",
    "InsertHit",
    "InsertHitPack",
    "InsertPack",
    "Mutation",
    "MutationKind",
    "StoreSnapshot",
    "SyncPlan",
    "SyncResult",
    "SyncStep",
    "UpdateHit",
    "UpdatePack",
    "apply_sync_plan",
    "plan_catalog_sync",
]
