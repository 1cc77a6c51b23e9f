"""YAML codec for the authoritative catalog file."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hitcatalog.domain.errors import CatalogError
from hitcatalog.domain.identity import Catalog
from hitcatalog.domain.model import Hit, Pack, utcnow

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)


class CatalogFileError(CatalogError):
    """Raised when the catalog file cannot be parsed into a valid catalog."""


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PackPayload(CatalogBaseModel):
    id: UUID
    name: str
    last_modified: datetime = Field(default_factory=utcnow)

    _normalize_last_modified = field_validator("last_modified")(_assume_utc)

    @classmethod
    def from_pack(cls, pack: Pack) -> PackPayload:
        return cls(id=pack.id, name=pack.name, last_modified=pack.last_modified)

    def to_pack(self) -> Pack:
        return Pack(id=self.id, name=self.name, last_modified=self.last_modified)


class HitPayload(CatalogBaseModel):
    id: UUID
    artist: str
    title: str
    yt_id: str
    year: int
    packs: list[UUID] = Field(default_factory=list[UUID])
    playback_offset: int = 0
    belongs_to: str = ""
    last_modified: datetime = Field(default_factory=utcnow)

    _normalize_last_modified = field_validator("last_modified")(_assume_utc)

    @classmethod
    def from_hit(cls, hit: Hit) -> HitPayload:
        return cls(
            id=hit.id,
            artist=hit.artist,
            title=hit.title,
            yt_id=hit.yt_id,
            year=hit.year,
            packs=list(hit.packs),
            playback_offset=hit.playback_offset,
            belongs_to=hit.belongs_to,
            last_modified=hit.last_modified,
        )

    def to_hit(self) -> Hit:
        return Hit(
            id=self.id,
            artist=self.artist,
            title=self.title,
            yt_id=self.yt_id,
            year=self.year,
            packs=list(dict.fromkeys(self.packs)),
            playback_offset=self.playback_offset,
            belongs_to=self.belongs_to,
            last_modified=self.last_modified,
        )


class CatalogDocument(CatalogBaseModel):
    hits: list[HitPayload] = Field(default_factory=list[HitPayload])
    packs: list[PackPayload] = Field(default_factory=list[PackPayload])

    @field_validator("hits", "packs", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> CatalogDocument:
        return cls(
            hits=[HitPayload.from_hit(hit) for hit in catalog.hits()],
            packs=[PackPayload.from_pack(pack) for pack in catalog.packs()],
        )

    def to_catalog(self) -> Catalog:
        pack_ids = {pack.id for pack in self.packs}
        for hit in self.hits:
            unknown = [pack_id for pack_id in hit.packs if pack_id not in pack_ids]
            if unknown:
                raise CatalogFileError(
                    f"Hit {hit.id} ({hit.artist}: {hit.title}) references unknown packs "
                    f"{', '.join(str(pack_id) for pack_id in unknown)}"
                )
        try:
            return Catalog(
                hits=(hit.to_hit() for hit in self.hits),
                packs=(pack.to_pack() for pack in self.packs),
            )
        except CatalogError as exc:
            raise CatalogFileError(str(exc)) from exc


def parse_catalog(text: str) -> Catalog:
    try:
        raw: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogFileError(f"Catalog file is not valid YAML: {exc}") from exc
    if raw is None:
        return Catalog.empty()
    try:
        document = CatalogDocument.model_validate(raw)
    except ValidationError as exc:
        raise CatalogFileError(f"Catalog file has an invalid shape: {exc}") from exc
    return document.to_catalog()


def load_catalog(path: Path) -> Catalog:
    """Read and validate the catalog at ``path``."""

    log.info("Loading catalog from %s", path)
    catalog = parse_catalog(path.read_text(encoding="utf-8"))
    log.info("Loaded %s hits and %s packs", len(catalog), len(catalog.packs()))
    return catalog


def load_catalog_or_empty(path: Path) -> Catalog:
    """Like :func:`load_catalog`, but a missing file yields an empty catalog."""

    if not path.exists():
        log.info("No catalog at %s, starting from an empty one", path)
        return Catalog.empty()
    return load_catalog(path)


def dump_catalog(catalog: Catalog) -> str:
    document = CatalogDocument.from_catalog(catalog)
    return yaml.safe_dump(
        document.model_dump(mode="json"),
        allow_unicode=True,
        sort_keys=False,
    )


def write_catalog(catalog: Catalog, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_catalog(catalog), encoding="utf-8")
    log.info("Wrote %s hits and %s packs to %s", len(catalog), len(catalog.packs()), path)
