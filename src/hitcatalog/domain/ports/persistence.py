"""Ports for the persisted store the catalog is reconciled into."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hitcatalog.domain.model import Hit
    from hitcatalog.domain.reconciliation.plan import StoreSnapshot, SyncStep


@runtime_checkable
class CatalogStore(Protocol):
    """Row-level read/write surface of the persisted store.

    ``snapshot`` returns the current rows. ``write`` applies every mutation of a
    step atomically or none of them, raising ``StoreWriteError`` on failure.
    """

    def snapshot(self) -> StoreSnapshot: ...

    def write(self, step: SyncStep) -> None: ...


@runtime_checkable
class DownloadProbe(Protocol):
    """Tell whether the audio backing a hit is already available locally."""

    def __call__(self, hit: Hit) -> bool: ...


def never_downloaded(hit: Hit) -> bool:
    _ = hit
    return False
