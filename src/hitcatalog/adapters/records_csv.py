"""Reader for the semicolon-separated import sheet."""

from __future__ import annotations

import csv
import logging
from typing import TYPE_CHECKING

from hitcatalog.domain.importing import RawRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

log = logging.getLogger(__name__)

DELIMITER = ";"


def parse_records(lines: Iterable[str]) -> Iterator[RawRecord]:
    """Yield one record per data row; the first row is the header."""

    reader = csv.reader(lines, delimiter=DELIMITER)
    header_seen = False
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        if not header_seen:
            header_seen = True
            log.debug("Skipping header row %s", row)
            continue
        yield RawRecord.from_row(row, line=reader.line_num)


def read_records(path: Path) -> Iterator[RawRecord]:
    log.info("Reading import records from %s", path)
    with path.open(encoding="utf-8", newline="") as handle:
        yield from parse_records(handle)
