"""Locations of the catalog file and the local hit downloads."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_path
from .errors import InvalidPathConfigurationError

DEFAULT_CATALOG_PATH: Final[Path] = Path("etc") / "hits.yml"
DEFAULT_DOWNLOAD_DIRECTORY: Final[Path] = Path("hits")


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    catalog_path: Path = DEFAULT_CATALOG_PATH
    download_dir: Path = DEFAULT_DOWNLOAD_DIRECTORY

    def __post_init__(self) -> None:
        if self.catalog_path.is_dir():
            raise InvalidPathConfigurationError(
                self.catalog_path, "Catalog path must be a file, got a directory"
            )


def get_catalog_config() -> CatalogConfig:
    return CatalogConfig(
        catalog_path=env_path("CATALOG_PATH", DEFAULT_CATALOG_PATH),
        download_dir=env_path("DOWNLOAD_DIRECTORY", DEFAULT_DOWNLOAD_DIRECTORY),
    )
