"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, debug: bool = False, force: bool = False) -> None:
    """Configure the root logger once.

    ``debug`` turns on one line per planned store write. SQLAlchemy's own engine
    logger stays at WARNING either way so SQL statements never flood the output.
    """

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
