"""Raw import records and their interpretation.

Raw records arrive as seven trimmed text columns. Interpreting one yields either
nothing (an intentionally empty row), an :class:`ImportRecord`, or a fatal
:class:`InvalidRecordError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from hitcatalog.domain.errors import InvalidRecordError

if TYPE_CHECKING:
    from collections.abc import Sequence

RECORD_COLUMNS: Final[tuple[str, ...]] = (
    "artist",
    "year",
    "title",
    "pack",
    "belongs_to",
    "locator",
    "playback_offset",
)

YT_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^.*((youtu.be\/)|(v\/)|(\/u\/\w\/)|(embed\/)|(watch\?))\??v?=?([^#&?]*).*"
)


def extract_yt_id(locator: str) -> str | None:
    """Return the YouTube video id contained in a link, if any."""

    match = YT_ID_PATTERN.match(locator)
    if match is None:
        return None
    return match.group(7) or None


@dataclass(frozen=True, slots=True, kw_only=True)
class RawRecord:
    artist: str
    year: str
    title: str
    pack: str
    belongs_to: str
    locator: str
    playback_offset: str
    line: int | None = None

    @classmethod
    def from_row(cls, row: Sequence[str], *, line: int | None = None) -> RawRecord:
        if len(row) < len(RECORD_COLUMNS):
            raise InvalidRecordError(
                f"expected {len(RECORD_COLUMNS)} columns, got {len(row)}",
                line=line,
            )
        values = dict(zip(RECORD_COLUMNS, (cell.strip() for cell in row), strict=False))
        return cls(line=line, **values)

    @property
    def label(self) -> str:
        return f"{self.artist}: {self.title}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportRecord:
    """A raw record whose key and numbers have been validated."""

    yt_id: str
    artist: str
    title: str
    year: int
    pack: str
    belongs_to: str
    playback_offset: int
    line: int | None = None

    @property
    def is_placeholder(self) -> bool:
        return not self.artist or not self.title or self.year == 0


def interpret_record(raw: RawRecord) -> ImportRecord | None:
    """Validate ``raw``; rows without a locator yield ``None``."""

    if not raw.locator:
        return None

    yt_id = extract_yt_id(raw.locator)
    if yt_id is None:
        raise InvalidRecordError(f"no valid link found for {raw.label}", line=raw.line)

    return ImportRecord(
        yt_id=yt_id,
        artist=raw.artist,
        title=raw.title,
        year=_parse_count(raw.year, "year", raw),
        pack=raw.pack,
        belongs_to=raw.belongs_to,
        playback_offset=_parse_count(raw.playback_offset, "playback offset", raw),
        line=raw.line,
    )


def _parse_count(value: str, name: str, raw: RawRecord) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise InvalidRecordError(
            f"invalid {name} {value!r} for {raw.label}", line=raw.line
        ) from exc
    if parsed < 0:
        raise InvalidRecordError(f"negative {name} {value!r} for {raw.label}", line=raw.line)
    return parsed
