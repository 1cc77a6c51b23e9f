from __future__ import annotations

from uuid import uuid4

import pytest

from hitcatalog.domain.errors import DuplicateHitError
from hitcatalog.domain.identity import (
    ById,
    ByYtId,
    Catalog,
    IdentityIndex,
    keys_for,
    natural_sort_key,
)
from tests.helpers.catalog import make_hit, make_pack


def test_index_resolves_value_by_every_key() -> None:
    hit = make_hit("abc")
    index: IdentityIndex[object, object] = IdentityIndex()

    assert index.insert(keys_for(hit), hit) == ()

    assert index.get(ById(hit.id)) is hit
    assert index.get(ByYtId("abc")) is hit
    assert len(index) == 1


def test_index_reports_collisions_without_overwriting() -> None:
    first = make_hit("abc")
    second = make_hit("abc")
    index: IdentityIndex[object, object] = IdentityIndex()
    index.insert(keys_for(first), first)

    collisions = index.insert(keys_for(second), second)

    assert [collision.key for collision in collisions] == [ByYtId("abc")]
    assert collisions[0].existing is first
    assert collisions[0].incoming is second
    assert index.get(ByYtId("abc")) is first
    assert index.get_all(ByYtId("abc")) == (first, second)
    assert index.get(ById(second.id)) is second
    assert len(index) == 2


def test_index_lookup_of_unknown_key() -> None:
    index: IdentityIndex[object, object] = IdentityIndex()

    assert index.get(ById(uuid4())) is None
    assert index.get_all(ByYtId("missing")) == ()
    assert not index.contains(ByYtId("missing"))


def test_hits_with_same_yt_id_are_equal() -> None:
    first = make_hit("abc", title="One")
    second = make_hit("abc", title="Two")

    assert first == second
    assert len({first, second}) == 1
    assert first != make_hit("xyz")


def test_catalog_rejects_duplicate_yt_id_and_stays_unchanged() -> None:
    catalog = Catalog(hits=[make_hit("abc")])
    duplicate = make_hit("abc")

    with pytest.raises(DuplicateHitError):
        catalog.insert_hit(duplicate)

    assert len(catalog) == 1
    assert not catalog.contains_hit(ById(duplicate.id))


def test_catalog_rejects_duplicate_id() -> None:
    hit = make_hit("abc")
    catalog = Catalog(hits=[hit])

    with pytest.raises(DuplicateHitError):
        catalog.insert_hit(make_hit("xyz", hit_id=hit.id))

    assert not catalog.contains_hit(ByYtId("xyz"))


def test_catalog_orders_hits_naturally() -> None:
    catalog = Catalog(
        hits=[
            make_hit("c", artist="Track 10", title="Song"),
            make_hit("a", artist="track 2", title="Song"),
            make_hit("b", artist="Track 1", title="Song"),
        ]
    )

    assert [hit.yt_id for hit in catalog.hits()] == ["b", "a", "c"]


def test_catalog_packs_sorted_by_name_and_found_by_name() -> None:
    rock = make_pack("Rock")
    eighties = make_pack("80s")
    catalog = Catalog(packs=[rock, eighties])

    assert catalog.packs() == [eighties, rock]
    assert catalog.find_pack_by_name("Rock") is rock
    assert catalog.find_pack_by_name("Jazz") is None


def test_natural_sort_key_compares_numbers() -> None:
    assert natural_sort_key("a2") < natural_sort_key("a10")
    assert natural_sort_key("B") == natural_sort_key("b")
