"""Catalog entities: hits and the packs they are grouped into."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Hit:
    """A song of the catalog.

    ``id`` is the stable surrogate identity, ``yt_id`` the natural key. Two hits
    are the same real-world song when their YouTube ids match, whatever ids they
    were assigned, so equality and hashing only look at ``yt_id``.
    """

    yt_id: str
    artist: str
    title: str
    year: int
    id: UUID = field(default_factory=new_id)
    packs: list[UUID] = field(default_factory=list[UUID])
    playback_offset: int = 0
    belongs_to: str = ""
    last_modified: datetime = field(default_factory=utcnow)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hit):
            return NotImplemented
        return self.yt_id == other.yt_id

    def __hash__(self) -> int:
        return hash(self.yt_id)

    def add_pack(self, pack_id: UUID) -> None:
        if pack_id not in self.packs:
            self.packs.append(pack_id)

    def same_content(self, other: Hit) -> bool:
        """Return whether every stored attribute except ``last_modified`` matches."""

        return (
            self.id == other.id
            and self.yt_id == other.yt_id
            and self.artist == other.artist
            and self.title == other.title
            and self.year == other.year
            and self.playback_offset == other.playback_offset
            and self.belongs_to == other.belongs_to
            and set(self.packs) == set(other.packs)
        )


@dataclass(eq=False, kw_only=True)
class Pack:
    """A named collection of hits."""

    name: str
    id: UUID = field(default_factory=new_id)
    last_modified: datetime = field(default_factory=utcnow)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pack):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
