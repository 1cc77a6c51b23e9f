"""Domain error hierarchy for catalog import and reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class CatalogError(Exception):
    """Base class for all catalog domain errors."""


class InvalidRecordError(CatalogError):
    """Raised when a raw import record cannot be interpreted.

    This is fatal for the whole import: no partial catalog is produced.
    """

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(f"{prefix}{message}")


class ImportCancelledError(CatalogError):
    """Raised when the operator cancels conflict resolution."""


class InvalidResolutionError(CatalogError):
    """Raised when a resolution policy picks a value that was not offered."""


class DuplicateHitError(CatalogError):
    """Raised when a catalog would hold two hits with the same id or YouTube id."""


class ProtectedRowError(CatalogError):
    """Raised when a mutation targets a row that reconciliation must not touch."""

    def __init__(self, kind: str, row_id: UUID | tuple[UUID, UUID]) -> None:
        self.kind = kind
        self.row_id = row_id
        super().__init__(f"Refusing to modify custom {kind} row {row_id}")


class StoreWriteError(CatalogError):
    """Raised by store adapters when a single write could not be applied."""
