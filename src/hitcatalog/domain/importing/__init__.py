"""Import merger: fold raw tabular records into an authoritative catalog."""

from __future__ import annotations

from .conflicts import (
    Cancel,
    ConflictSet,
    Decision,
    FieldConflict,
    FieldValue,
    Resolution,
    ResolutionPolicy,
    keep_existing,
    prefer_incoming,
    refuse_conflicts,
)
from .merger import ImportMerger, ImportResult
from .records import ImportRecord, RawRecord, extract_yt_id, interpret_record

__all__ = [
    "Cancel",
    "ConflictSet",
    "Decision",
    "FieldConflict",
    "FieldValue",
    "ImportMerger",
    "ImportRecord",
    "ImportResult",
    "RawRecord",
    "Resolution",
    "ResolutionPolicy",
    "extract_yt_id",
    "interpret_record",
    "keep_existing",
    "prefer_incoming",
    "refuse_conflicts",
]
