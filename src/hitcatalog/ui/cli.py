from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Final

from dotenv import load_dotenv

from hitcatalog.adapters.terminal import TerminalResolver
from hitcatalog.app import import_catalog, sync_catalog
from hitcatalog.config import configure_logging
from hitcatalog.domain.errors import ImportCancelledError
from hitcatalog.domain.importing import keep_existing, prefer_incoming, refuse_conflicts

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from hitcatalog.domain.importing import ResolutionPolicy

log = logging.getLogger(__name__)

EXIT_FATAL: Final[int] = 1
EXIT_USAGE: Final[int] = 2
EXIT_CANCELLED: Final[int] = 3

POLICY_CHOICES: Final[tuple[str, ...]] = (
    "interactive",
    "keep-existing",
    "prefer-incoming",
    "cancel",
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain the hit catalog and its store")
    parser.add_argument("--debug", action="store_true", help="Log every planned write")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Rebuild the catalog from an import sheet")
    importer.add_argument("records", type=Path, help="Semicolon separated import sheet")
    importer.add_argument(
        "--catalog",
        type=Path,
        help="Prior catalog whose ids are reused (defaults to CATALOG_PATH)",
    )
    importer.add_argument(
        "--output",
        type=Path,
        help="Where to write the new catalog (defaults to the prior catalog path)",
    )
    importer.add_argument(
        "--policy",
        choices=POLICY_CHOICES,
        default="interactive",
        help="How to settle conflicting values (default: %(default)s)",
    )

    sync = subparsers.add_parser("sync", help="Reconcile the store with the catalog")
    sync.add_argument("--catalog", type=Path, help="Catalog file (defaults to CATALOG_PATH)")
    sync.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI)",
    )
    sync.add_argument(
        "--download-dir",
        type=Path,
        help="Directory of downloaded hits (defaults to DOWNLOAD_DIRECTORY)",
    )

    return parser.parse_args(list(argv))


def _resolution_policy(name: str) -> ResolutionPolicy:
    if name == "interactive":
        return TerminalResolver()
    policies: dict[str, ResolutionPolicy] = {
        "keep-existing": keep_existing,
        "prefer-incoming": prefer_incoming,
        "cancel": refuse_conflicts,
    }
    try:
        return policies[name]
    except KeyError as exc:
        raise ValueError(f"Unknown resolution policy: {name}") from exc


def _validate(args: argparse.Namespace) -> None:
    if args.command == "import" and not args.records.is_file():
        raise ValueError(f"Import sheet not found: {args.records}")
    catalog = getattr(args, "catalog", None)
    if catalog is not None and catalog.is_dir():
        raise ValueError(f"Catalog path is a directory: {catalog}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(debug=parsed_args.debug)
    try:
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    try:
        if parsed_args.command == "import":
            import_catalog(
                parsed_args.records,
                catalog_path=parsed_args.catalog,
                output_path=parsed_args.output,
                policy=_resolution_policy(parsed_args.policy),
            )
        elif parsed_args.command == "sync":
            sync_catalog(
                catalog_path=parsed_args.catalog,
                database_uri=parsed_args.database_uri,
                download_dir=parsed_args.download_dir,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ImportCancelledError as exc:
        log.warning("Import cancelled, nothing was written: %s", exc)
        sys.exit(EXIT_CANCELLED)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FATAL)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
