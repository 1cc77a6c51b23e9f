"""Conflict descriptions and resolution policies for the import merger.

When two records describe the same hit with different values, the merger builds
a :class:`ConflictSet` and hands it to a :class:`ResolutionPolicy`. A policy
either cancels the whole import or picks one of the offered values per field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Protocol

from hitcatalog.domain.errors import InvalidResolutionError
from hitcatalog.domain.model import HitField

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from uuid import UUID

type FieldValue = str | int

CONCATENATABLE_FIELDS: Final[frozenset[HitField]] = frozenset(
    {HitField.ARTIST, HitField.BELONGS_TO}
)


@dataclass(frozen=True, slots=True)
class FieldConflict:
    field: HitField
    existing: FieldValue
    incoming: FieldValue

    @property
    def options(self) -> tuple[FieldValue, ...]:
        if self.field in CONCATENATABLE_FIELDS:
            return (self.existing, self.incoming, f"{self.existing}, {self.incoming}")
        return (self.existing, self.incoming)


@dataclass(frozen=True, slots=True)
class ConflictSet:
    """Every field on which an incoming record disagrees with a known hit."""

    hit_id: UUID
    yt_id: str
    label: str
    conflicts: tuple[FieldConflict, ...]
    line: int | None = None

    def __iter__(self) -> Iterator[FieldConflict]:
        return iter(self.conflicts)

    def __len__(self) -> int:
        return len(self.conflicts)

    @property
    def fields(self) -> tuple[HitField, ...]:
        return tuple(conflict.field for conflict in self.conflicts)

    def validate(self, resolution: Resolution) -> dict[HitField, FieldValue]:
        """Check that ``resolution`` picks an offered value for every conflicting field."""

        chosen: dict[HitField, FieldValue] = {}
        for conflict in self.conflicts:
            if conflict.field not in resolution.values:
                raise InvalidResolutionError(
                    f"No value chosen for {conflict.field} of {self.label}"
                )
            value = resolution.values[conflict.field]
            if value not in conflict.options:
                raise InvalidResolutionError(
                    f"{value!r} is not an offered value for {conflict.field} of {self.label}"
                )
            chosen[conflict.field] = value
        return chosen


@dataclass(frozen=True, slots=True)
class Cancel:
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class Resolution:
    values: Mapping[HitField, FieldValue]


type Decision = Cancel | Resolution


class ResolutionPolicy(Protocol):
    """Decide how to settle a set of conflicting field values."""

    def __call__(self, conflicts: ConflictSet) -> Decision: ...


def keep_existing(conflicts: ConflictSet) -> Decision:
    """Keep the values of the first record seen for a hit."""

    return Resolution({conflict.field: conflict.existing for conflict in conflicts})


def prefer_incoming(conflicts: ConflictSet) -> Decision:
    """Let the later record win, for unattended runs over ordered sources."""

    return Resolution({conflict.field: conflict.incoming for conflict in conflicts})


def refuse_conflicts(conflicts: ConflictSet) -> Decision:
    """Cancel the import on the first conflict."""

    return Cancel(reason=f"conflicting values for {conflicts.label}")
