from __future__ import annotations

from datetime import timedelta

import pytest

from hitcatalog.domain.errors import ProtectedRowError
from hitcatalog.domain.identity import Catalog
from hitcatalog.domain.model import RowOrigin, RowState, RowStatus
from hitcatalog.domain.reconciliation import (
    DeleteHit,
    DeleteHitPack,
    DeletePack,
    InsertHit,
    InsertHitPack,
    InsertPack,
    MutationKind,
    StoreSnapshot,
    SyncPlan,
    UpdateHit,
    UpdatePack,
    plan_catalog_sync,
)
from tests.helpers.catalog import (
    T0,
    T1,
    make_hit,
    make_pack,
    stored_hit,
    stored_hit_pack,
    stored_pack,
)


def test_empty_store_gets_every_catalog_row() -> None:
    pack = make_pack("PackA")
    hit = make_hit("abc", title="Song", year=2000, packs=[pack.id])

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack]), StoreSnapshot())

    assert plan.mutations == (
        InsertPack(pack),
        InsertHit(hit),
        InsertHitPack(hit.id, pack.id),
    )


def test_in_sync_store_needs_no_writes() -> None:
    pack = make_pack("PackA")
    hit = make_hit("abc", packs=[pack.id])
    snapshot = StoreSnapshot(
        hits=(stored_hit(hit),),
        packs=(stored_pack(pack),),
        hit_packs=(stored_hit_pack(hit.id, pack.id),),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack]), snapshot)

    assert plan.is_empty()


def test_download_probe_sets_flag_on_insert() -> None:
    hit = make_hit("abc")

    plan = plan_catalog_sync(
        Catalog(hits=[hit]), StoreSnapshot(), is_downloaded=lambda candidate: candidate is hit
    )

    (insert,) = plan.mutations
    assert isinstance(insert, InsertHit)
    assert insert.downloaded


@pytest.mark.parametrize(
    ("stored_at", "expect_update"),
    [(T0, True), (T1, False), (T1 + timedelta(days=1), False)],
)
def test_staleness_gate_is_strict(stored_at: object, expect_update: bool) -> None:
    hit = make_hit("abc", at=T1, title="Changed")
    pack = make_pack("PackA", at=T1)
    snapshot = StoreSnapshot(
        hits=(stored_hit(hit, at=stored_at),),  # type: ignore[arg-type]
        packs=(stored_pack(pack, at=stored_at),),  # type: ignore[arg-type]
    )

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack]), snapshot)

    assert (plan.count(MutationKind.UPDATE) == 2) is expect_update
    assert plan.count(MutationKind.INSERT) == 0
    assert plan.count(MutationKind.DELETE) == 0


def test_stale_rows_are_updated() -> None:
    pack = make_pack("PackA", at=T1)
    hit = make_hit("abc", at=T1)
    old_hit = stored_hit(hit, at=T0)
    old_pack = stored_pack(pack, at=T0)

    plan = plan_catalog_sync(
        Catalog(hits=[hit], packs=[pack]),
        StoreSnapshot(hits=(old_hit,), packs=(old_pack,)),
    )

    assert plan.mutations == (UpdatePack(pack, old_pack), UpdateHit(hit, old_hit))


def test_rows_missing_from_catalog_are_deleted() -> None:
    gone_pack = stored_pack(make_pack("Gone"))
    gone_hit = stored_hit(yt_id="gone")
    association = stored_hit_pack(gone_hit.id, gone_pack.id)

    plan = plan_catalog_sync(
        Catalog.empty(),
        StoreSnapshot(hits=(gone_hit,), packs=(gone_pack,), hit_packs=(association,)),
    )

    assert plan.mutations == (DeletePack(gone_pack), DeleteHit(gone_hit))


def test_custom_rows_are_never_touched() -> None:
    pack = make_pack("PackA", at=T1)
    hit = make_hit("abc", at=T1, packs=[pack.id])
    custom_pack = stored_pack(make_pack("Mine"), custom=True)
    custom_hit = stored_hit(yt_id="mine", custom=True)
    stale_custom_hit = stored_hit(hit, at=T0, custom=True)
    stale_custom_pack = stored_pack(pack, at=T0, custom=True)
    snapshot = StoreSnapshot(
        hits=(custom_hit, stale_custom_hit),
        packs=(custom_pack, stale_custom_pack),
        hit_packs=(
            stored_hit_pack(custom_hit.id, custom_pack.id, custom=True),
            stored_hit_pack(hit.id, custom_pack.id),
        ),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack]), snapshot)

    assert plan.is_empty()


def test_custom_association_survives_while_stale_ones_go() -> None:
    pack = make_pack("PackA")
    other = make_pack("PackB")
    mine = make_pack("Mine")
    hit = make_hit("abc", packs=[pack.id])
    custom_link = stored_hit_pack(hit.id, mine.id, custom=True)
    stale_link = stored_hit_pack(hit.id, other.id)
    snapshot = StoreSnapshot(
        hits=(stored_hit(hit),),
        packs=(stored_pack(pack), stored_pack(other), stored_pack(mine, custom=True)),
        hit_packs=(stored_hit_pack(hit.id, pack.id), custom_link, stale_link),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack, other]), snapshot)

    assert plan.mutations == (DeleteHitPack(stale_link),)


def test_associations_of_deleted_packs_are_left_to_the_pack_delete() -> None:
    gone = stored_pack(make_pack("Gone"))
    hit = make_hit("abc")
    snapshot = StoreSnapshot(
        hits=(stored_hit(hit),),
        packs=(gone,),
        hit_packs=(stored_hit_pack(hit.id, gone.id),),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit]), snapshot)

    assert plan.mutations == (DeletePack(gone),)


def test_pack_referenced_by_custom_association_is_kept() -> None:
    pack = stored_pack(make_pack("Gone"))
    user_hit = stored_hit(yt_id="usr", custom=True)
    snapshot = StoreSnapshot(
        hits=(user_hit,),
        packs=(pack,),
        hit_packs=(stored_hit_pack(user_hit.id, pack.id, custom=True),),
    )

    plan = plan_catalog_sync(Catalog.empty(), snapshot)

    assert plan.is_empty()


def test_custom_association_of_duplicate_keeps_its_pack() -> None:
    pack = stored_pack(make_pack("Gone"))
    hit = make_hit("abc")
    duplicate = stored_hit(yt_id="abc")
    snapshot = StoreSnapshot(
        hits=(duplicate,),
        packs=(pack,),
        hit_packs=(stored_hit_pack(duplicate.id, pack.id, custom=True),),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit]), snapshot)

    assert plan.count(MutationKind.DELETE) == 1
    assert DeletePack(pack) not in plan.mutations
    assert InsertHitPack(hit.id, pack.id, RowState(origin=RowOrigin.CUSTOM)) in plan.mutations


def test_custom_association_of_deleted_hit_does_not_keep_its_pack() -> None:
    pack = stored_pack(make_pack("Gone"))
    row = stored_hit(yt_id="old")
    snapshot = StoreSnapshot(
        hits=(row,),
        packs=(pack,),
        hit_packs=(stored_hit_pack(row.id, pack.id, custom=True),),
    )

    plan = plan_catalog_sync(Catalog.empty(), snapshot)

    assert plan.mutations == (DeletePack(pack), DeleteHit(row))


def test_carried_catalog_association_is_pruned_on_the_next_pass() -> None:
    kept = make_pack("PackX")
    listed = make_pack("PackY")
    hit = make_hit("abc", packs=[listed.id])
    duplicate = stored_hit(yt_id="abc")
    catalog = Catalog(hits=[hit], packs=[kept, listed])
    packs = (stored_pack(kept), stored_pack(listed))

    first = plan_catalog_sync(
        catalog,
        StoreSnapshot(
            hits=(duplicate,),
            packs=packs,
            hit_packs=(stored_hit_pack(duplicate.id, kept.id),),
        ),
    )
    carried = stored_hit_pack(hit.id, kept.id)
    second = plan_catalog_sync(
        catalog,
        StoreSnapshot(
            hits=(stored_hit(hit),),
            packs=packs,
            hit_packs=(carried, stored_hit_pack(hit.id, listed.id)),
        ),
    )

    assert InsertHitPack(hit.id, kept.id) in first.mutations
    assert InsertHitPack(hit.id, listed.id) in first.mutations
    assert second.mutations == (DeleteHitPack(carried),)


def test_missing_membership_is_inserted() -> None:
    pack = make_pack("PackA")
    hit = make_hit("abc", packs=[pack.id])
    snapshot = StoreSnapshot(hits=(stored_hit(hit),), packs=(stored_pack(pack),))

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack]), snapshot)

    assert plan.mutations == (InsertHitPack(hit.id, pack.id),)


def test_accidental_duplicate_is_replaced_in_one_step() -> None:
    pack_a = make_pack("PackA")
    pack_b = make_pack("PackB")
    hit = make_hit("abc", packs=[pack_b.id])
    duplicate = stored_hit(yt_id="abc", marked_for_deletion=True)
    snapshot = StoreSnapshot(
        hits=(duplicate,),
        packs=(stored_pack(pack_a), stored_pack(pack_b)),
        hit_packs=(stored_hit_pack(duplicate.id, pack_a.id, custom=True),),
    )

    plan = plan_catalog_sync(Catalog(hits=[hit], packs=[pack_a, pack_b]), snapshot)

    replace_step, *membership_steps = plan.steps
    assert replace_step.mutations[0] == DeleteHit(duplicate)
    insert = replace_step.mutations[1]
    assert isinstance(insert, InsertHit)
    assert insert.hit is hit
    assert insert.state.status is RowStatus.MARKED_FOR_DELETION
    memberships = [step.mutations[0] for step in membership_steps]
    assert memberships == [
        InsertHitPack(hit.id, pack_a.id, RowState(origin=RowOrigin.CUSTOM)),
        InsertHitPack(hit.id, pack_b.id),
    ]
    assert plan.count(MutationKind.DELETE) == 1


def test_custom_duplicate_is_kept_next_to_catalog_hit() -> None:
    hit = make_hit("abc")
    custom = stored_hit(yt_id="abc", custom=True)

    plan = plan_catalog_sync(Catalog(hits=[hit]), StoreSnapshot(hits=(custom,)))

    assert plan.mutations == (InsertHit(hit),)


def test_hit_stored_under_previous_id_is_replaced() -> None:
    first = make_hit("abc")
    snapshot = StoreSnapshot(hits=(stored_hit(first),))
    renamed = make_hit("abc")

    plan = plan_catalog_sync(Catalog(hits=[renamed]), snapshot)

    assert plan.count(MutationKind.DELETE) == 1
    assert plan.count(MutationKind.INSERT) == 1
    assert len(plan.steps) == 1


def test_plan_rejects_mutation_of_custom_rows() -> None:
    plan = SyncPlan()
    custom_hit = stored_hit(yt_id="mine", custom=True)
    custom_pack = stored_pack(make_pack("Mine"), custom=True)

    with pytest.raises(ProtectedRowError):
        plan.add(DeleteHit(custom_hit), description="delete")
    with pytest.raises(ProtectedRowError):
        plan.add(UpdatePack(make_pack("Mine"), custom_pack), description="update")
    with pytest.raises(ProtectedRowError):
        plan.add(
            DeleteHitPack(stored_hit_pack(custom_hit.id, custom_pack.id, custom=True)),
            description="unlink",
        )

    assert plan.is_empty()
