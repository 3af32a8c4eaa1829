"""Chunked CSV load into the untyped staging table."""

import codecs
import csv
import logging
from pathlib import Path
from typing import Any, Iterator

from cycleload.ingestion.normalizer import RawRecord
from cycleload.ingestion.schema import (
    RAW_COLUMNS,
    STAGING_COLUMNS,
    STAGING_TABLE,
    staging_ddl,
    validate_table_name,
)
from cycleload.service import DatabaseService

logger = logging.getLogger(__name__)


class StagingLoadError(RuntimeError):
    """The source file could not be read into the staging table."""


def clean_field(value: str | None) -> str | None:
    """Trim whitespace; empty strings become None."""
    if value is None:
        return None
    return value.strip() or None


def read_raw_rows(
    file_path: str | Path,
    encoding: str,
    header_rows: int = 1,
    delimiter: str = ";",
) -> Iterator[tuple[int, RawRecord]]:
    """Yield (row_num, RawRecord) for each non-blank data row.

    Header rows are counted as logical CSV records, so a quoted header that
    spans several physical lines is skipped as one row. row_num is the
    1-based position of the data row in the file, blank rows included.
    """
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValueError(f"Unknown encoding: {encoding!r}") from e

    with open(file_path, newline="", encoding=encoding) as f:
        reader = csv.reader(f, delimiter=delimiter, quotechar='"')
        for _ in range(header_rows):
            if next(reader, None) is None:
                return

        for row_num, row in enumerate(reader, start=1):
            fields = [clean_field(cell) for cell in row[: len(RAW_COLUMNS)]]
            if all(field is None for field in fields):
                logger.debug("Skipping blank row %d", row_num)
                continue
            if len(row) > len(RAW_COLUMNS):
                logger.debug(
                    "Row %d has %d columns, ignoring the surplus", row_num, len(row)
                )
            yield row_num, RawRecord.from_fields(fields)


def chunked_rows(
    rows: Iterator[tuple[int, RawRecord]], chunk_size: int = 5000
) -> Iterator[list[tuple]]:
    """Group staged rows into insertable tuples, chunk_size at a time."""
    chunk: list[tuple] = []
    for row_num, raw in rows:
        chunk.append((row_num, *(getattr(raw, col) for col in RAW_COLUMNS)))
        if len(chunk) >= chunk_size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def stage_csv(
    service: DatabaseService,
    file_path: str | Path,
    encoding: str,
    table: str = STAGING_TABLE,
    header_rows: int = 1,
    delimiter: str = ";",
    chunk_size: int = 5000,
) -> int:
    """Load a cycle export into a freshly recreated staging table.

    Each chunk is its own transaction. Read and decode failures are raised
    as StagingLoadError; rows committed before the failure stay staged.

    Returns the number of staged rows.
    """
    service.execute_ddl(staging_ddl(table))
    logger.info("Importing from: %s (encoding %s)", file_path, encoding)

    total = 0
    rows = read_raw_rows(file_path, encoding, header_rows, delimiter)
    try:
        for i, chunk in enumerate(chunked_rows(rows, chunk_size)):
            with service.transaction():
                service.batch_insert(table, STAGING_COLUMNS, chunk)
            total += len(chunk)
            logger.info("Chunk %d: staged %d rows (total: %d)", i + 1, len(chunk), total)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error("Staging %s failed after %d rows: %s", file_path, total, e)
        raise StagingLoadError(f"Failed to stage {file_path}: {e}") from e

    logger.info("Staging complete: %d rows in %s", total, table)
    return total


def count_staged(service: DatabaseService, table: str = STAGING_TABLE) -> int:
    table = validate_table_name(table)
    with service.transaction():
        rows = service.execute(f"SELECT COUNT(*) AS cnt FROM {table}")
    return int(rows[0]["cnt"])


def preview_staged(
    service: DatabaseService, table: str = STAGING_TABLE, limit: int = 20
) -> list[dict[str, Any]]:
    """Return the first staged rows for a quick visual check."""
    table = validate_table_name(table)
    with service.transaction():
        return service.execute(
            f"SELECT {', '.join(STAGING_COLUMNS)} FROM {table} "
            f"ORDER BY row_num LIMIT {service.placeholder}",
            (limit,),
        )
