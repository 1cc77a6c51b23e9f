"""Apply a sync plan to a store, one step at a time.

Steps are independent: a step that fails is logged and counted, and the pass
carries on with the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from hitcatalog.domain.errors import StoreWriteError

from .plan import MutationKind

if TYPE_CHECKING:
    from hitcatalog.domain.ports import CatalogStore

    from .plan import SyncPlan, SyncStep

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncResult:
    """Summary of the writes performed by one reconciliation pass."""

    inserted: int = 0
    updated: int = 0
    deleted: int = 0
    failed: int = 0

    @property
    def writes(self) -> int:
        return self.inserted + self.updated + self.deleted

    def record(self, step: SyncStep) -> None:
        for mutation in step.mutations:
            if mutation.KIND is MutationKind.INSERT:
                self.inserted += 1
            elif mutation.KIND is MutationKind.UPDATE:
                self.updated += 1
            else:
                self.deleted += 1


def apply_sync_plan(plan: SyncPlan, store: CatalogStore) -> SyncResult:
    result = SyncResult()
    for step in plan.steps:
        log.debug(step.description)
        try:
            store.write(step)
        except StoreWriteError as exc:
            result.failed += len(step.mutations)
            log.warning("Failed to apply step (%s): %s", step.description, exc)
            continue
        result.record(step)

    if result.failed:
        log.warning("Reconciliation finished with %s failed writes", result.failed)
    log.info(
        "Finished merging database: inserted=%s, updated=%s, deleted=%s, failed=%s",
        result.inserted,
        result.updated,
        result.deleted,
        result.failed,
    )
    return result
