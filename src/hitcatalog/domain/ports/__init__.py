"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import CatalogStore, DownloadProbe, never_downloaded

__all__ = [
    "CatalogStore",
    "DownloadProbe",
    "never_downloaded",
]
