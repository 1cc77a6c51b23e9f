"""Dual-key identity index and the in-memory catalog built on top of it.

A hit can be looked up either by its surrogate id or by its YouTube id. Both key
spaces share one :class:`IdentityIndex`, keyed by the small tagged union
:data:`HitKey`. Registering a value under a key that already points at another
value does not overwrite anything: both bindings are kept and the collision is
reported back to the caller, which has to decide what it means.
"""

from __future__ import annotations

import re
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hitcatalog.domain.errors import DuplicateHitError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from uuid import UUID

    from hitcatalog.domain.model import Hit, Pack


@dataclass(frozen=True, slots=True)
class ById:
    id: UUID


@dataclass(frozen=True, slots=True)
class ByYtId:
    yt_id: str


type HitKey = ById | ByYtId


def keys_for(hit: Hit) -> tuple[HitKey, ...]:
    """Return every key a hit is registered under."""

    return (ById(hit.id), ByYtId(hit.yt_id))


@dataclass(frozen=True, slots=True)
class KeyCollision[K: Hashable, V]:
    """A key that was already bound to a different value during ``insert``."""

    key: K
    existing: V
    incoming: V


@dataclass(slots=True)
class IdentityIndex[K: Hashable, V]:
    """Map several keys onto one shared value.

    Values are held once in ``_values``; every key maps to the positions of the
    values registered under it, in registration order.
    """

    _values: list[V] = field(default_factory=list["V"])
    _slots: dict[K, list[int]] = field(default_factory=dict["K", list[int]])

    def insert(self, keys: Iterable[K], value: V) -> tuple[KeyCollision[K, V], ...]:
        """Register ``value`` under every key and report keys that were already taken."""

        position = len(self._values)
        self._values.append(value)
        collisions: list[KeyCollision[K, V]] = []
        for key in dict.fromkeys(keys):
            bound = self._slots.setdefault(key, [])
            collisions.extend(
                KeyCollision(key=key, existing=self._values[slot], incoming=value)
                for slot in bound
                if self._values[slot] is not value
            )
            bound.append(position)
        return tuple(collisions)

    def get(self, key: K) -> V | None:
        bound = self._slots.get(key)
        if not bound:
            return None
        return self._values[bound[0]]

    def get_all(self, key: K) -> tuple[V, ...]:
        return tuple(self._values[slot] for slot in self._slots.get(key, ()))

    def contains(self, key: K) -> bool:
        return bool(self._slots.get(key))

    def values(self) -> Iterator[V]:
        seen: set[int] = set()
        for value in self._values:
            if id(value) in seen:
                continue
            seen.add(id(value))
            yield value

    def __len__(self) -> int:
        return sum(1 for _ in self.values())


_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(text: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key comparing digit runs numerically and everything else case-insensitively."""

    parts: list[tuple[int, int | str]] = []
    for chunk in _DIGITS.split(text):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk.casefold()))
    return tuple(parts)


def hit_sort_key(hit: Hit) -> tuple[tuple[int, int | str], ...]:
    return natural_sort_key(f"{hit.artist}{hit.title}{hit.year}{hit.belongs_to}")


class Catalog:
    """The authoritative catalog: hits indexed by id and YouTube id, plus packs."""

    def __init__(self, hits: Iterable[Hit] = (), packs: Iterable[Pack] = ()) -> None:
        self._hits: IdentityIndex[HitKey, Hit] = IdentityIndex()
        self._packs: dict[UUID, Pack] = {}
        for pack in packs:
            self.insert_pack(pack)
        for hit in hits:
            self.insert_hit(hit)

    @classmethod
    def empty(cls) -> Catalog:
        return cls()

    def insert_hit(self, hit: Hit) -> None:
        """Add ``hit``; a second hit with the same id or YouTube id is rejected."""

        # Probe first so a rejected hit leaves the index untouched.
        for key in keys_for(hit):
            existing = self._hits.get(key)
            if existing is not None and existing is not hit:
                raise DuplicateHitError(
                    f"Hit {hit.id} ({hit.yt_id}) clashes with {existing.id} ({existing.yt_id})"
                )
        self._hits.insert(keys_for(hit), hit)

    def insert_pack(self, pack: Pack) -> None:
        self._packs[pack.id] = pack

    def get_hit(self, key: HitKey) -> Hit | None:
        return self._hits.get(key)

    def contains_hit(self, key: HitKey) -> bool:
        return self._hits.contains(key)

    def get_pack(self, pack_id: UUID) -> Pack | None:
        return self._packs.get(pack_id)

    def find_pack_by_name(self, name: str) -> Pack | None:
        for pack in self._packs.values():
            if pack.name == name:
                return pack
        return None

    def hits(self) -> list[Hit]:
        """Hits in natural order of artist, title, year and belongs-to."""

        return sorted(self._hits.values(), key=hit_sort_key)

    def packs(self) -> list[Pack]:
        return sorted(self._packs.values(), key=lambda pack: natural_sort_key(pack.name))

    def __len__(self) -> int:
        return len(self._hits)
