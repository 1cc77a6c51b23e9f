"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RowOrigin(StrEnum):
    """Who owns a persisted row."""

    CATALOG = "catalog"
    CUSTOM = "custom"


class RowStatus(StrEnum):
    """Soft-deletion state of a persisted row."""

    ACTIVE = "active"
    MARKED_FOR_DELETION = "marked_for_deletion"


class HitField(StrEnum):
    """Descriptive hit fields that can disagree between import records."""

    TITLE = "title"
    ARTIST = "artist"
    YEAR = "year"
    BELONGS_TO = "belongs_to"
    PLAYBACK_OFFSET = "playback_offset"
