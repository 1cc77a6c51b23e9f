"""Public domain model surface."""

from __future__ import annotations

from hitcatalog.domain.model.catalog import Hit, Pack, new_id, utcnow
from hitcatalog.domain.model.enums import HitField, RowOrigin, RowStatus
from hitcatalog.domain.model.rows import RowState, StoredHit, StoredHitPack, StoredPack

__all__ = [  # noqa: RUF022
    # catalog
    "Hit",
    "Pack",
    "new_id",
    "utcnow",
    # store rows
    "RowState",
    "StoredHit",
    "StoredHitPack",
    "StoredPack",
    # enums
    "HitField",
    "RowOrigin",
    "RowStatus",
]
