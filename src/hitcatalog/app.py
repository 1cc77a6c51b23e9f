"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from hitcatalog.adapters.catalog_file import load_catalog, load_catalog_or_empty, write_catalog
from hitcatalog.adapters.downloads import DownloadDirectory
from hitcatalog.adapters.records_csv import read_records
from hitcatalog.adapters.sqlalchemy import SqlAlchemyCatalogStore, configured_engine, startup
from hitcatalog.config import get_catalog_config
from hitcatalog.domain.importing import ImportMerger, keep_existing
from hitcatalog.domain.reconciliation import CatalogSyncEngine

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from hitcatalog.domain.importing import ImportResult, ResolutionPolicy
    from hitcatalog.domain.reconciliation import SyncResult


log = getLogger(__name__)


def import_catalog(
    records_path: Path,
    *,
    catalog_path: Path | None = None,
    output_path: Path | None = None,
    policy: ResolutionPolicy = keep_existing,
) -> ImportResult:
    """Rebuild the catalog from an import sheet, reusing ids from the prior catalog.

    The output file is only written when the whole merge succeeded.
    """

    effective_catalog_path = catalog_path or get_catalog_config().catalog_path
    effective_output_path = output_path or effective_catalog_path
    log.info(
        "Starting import: records=%s, prior catalog=%s, output=%s",
        records_path,
        effective_catalog_path,
        effective_output_path,
    )

    prior = load_catalog_or_empty(effective_catalog_path)
    merger = ImportMerger(prior=prior, policy=policy)
    result = merger.merge(read_records(records_path))
    write_catalog(result.catalog, effective_output_path)

    log.info(
        "Finished import: read=%s, skipped=%s, hits=%s, new=%s, reused=%s, conflicts=%s",
        result.read,
        result.skipped,
        len(result.catalog),
        result.new_hits,
        result.reused_ids,
        result.conflicts,
    )
    return result


def sync_catalog(
    *,
    catalog_path: Path | None = None,
    database_uri: str | None = None,
    download_dir: Path | None = None,
    engine: Engine | None = None,
) -> SyncResult:
    """Reconcile the persisted store with the catalog file."""

    config = get_catalog_config()
    effective_catalog_path = catalog_path or config.catalog_path
    effective_download_dir = download_dir or config.download_dir

    startup(engine=engine, database_uri=database_uri, force=True)
    sync_engine = CatalogSyncEngine(
        store=SqlAlchemyCatalogStore(configured_engine()),
        is_downloaded=DownloadDirectory(effective_download_dir),
    )
    catalog = load_catalog(effective_catalog_path)
    log.info("Starting sync of %s hits into the store", len(catalog))

    result = sync_engine.sync(catalog)

    if result.failed:
        log.warning("%s writes could not be applied, see the messages above", result.failed)
    log.info(
        "Finished sync: inserted=%s, updated=%s, deleted=%s",
        result.inserted,
        result.updated,
        result.deleted,
    )
    return result
