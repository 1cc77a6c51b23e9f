from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from hitcatalog.domain.errors import StoreWriteError
from hitcatalog.domain.identity import Catalog
from hitcatalog.domain.reconciliation import (
    CatalogSyncEngine,
    InsertHit,
    InsertHitPack,
    InsertPack,
    StoreSnapshot,
    SyncPlan,
    apply_sync_plan,
)
from tests.helpers.catalog import make_hit, make_pack

if TYPE_CHECKING:
    from hitcatalog.domain.reconciliation import SyncStep


class FakeCatalogStore:
    """In-memory store that records steps and fails the ones it is told to."""

    def __init__(self, *, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.written: list[SyncStep] = []

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot()

    def write(self, step: SyncStep) -> None:
        if step.description in self.fail_on:
            raise StoreWriteError(f"boom: {step.description}")
        self.written.append(step)


def test_apply_counts_writes_per_kind() -> None:
    pack = make_pack("PackA")
    hit = make_hit("abc", packs=[pack.id])
    plan = SyncPlan()
    plan.add(InsertPack(pack), description="pack")
    plan.add(InsertHit(hit), InsertHitPack(hit.id, pack.id), description="hit")
    store = FakeCatalogStore()

    result = apply_sync_plan(plan, store)

    assert result.inserted == 3
    assert result.writes == 3
    assert result.failed == 0
    assert [step.description for step in store.written] == ["pack", "hit"]


def test_failed_step_is_counted_and_others_still_applied(caplog: pytest.LogCaptureFixture) -> None:
    plan = SyncPlan()
    plan.add(InsertPack(make_pack("A")), description="first")
    plan.add(InsertHit(make_hit("abc")), InsertHit(make_hit("xyz")), description="broken")
    plan.add(InsertPack(make_pack("B")), description="last")
    store = FakeCatalogStore(fail_on={"broken"})

    with caplog.at_level(logging.WARNING):
        result = apply_sync_plan(plan, store)

    assert result.failed == 2
    assert result.inserted == 2
    assert [step.description for step in store.written] == ["first", "last"]
    assert "boom: broken" in caplog.text


def test_engine_reads_plans_and_applies() -> None:
    pack = make_pack("PackA")
    hit = make_hit("abc", packs=[pack.id])
    store = FakeCatalogStore()

    result = CatalogSyncEngine(store=store).sync(Catalog(hits=[hit], packs=[pack]))

    assert result.inserted == 3
    assert len(store.written) == 3
