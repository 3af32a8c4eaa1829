"""Staging -> typed target table import."""

import logging
from dataclasses import dataclass
from typing import Iterator

from cycleload.ingestion.config import ImportConfig
from cycleload.ingestion.normalizer import RawRecord, normalize
from cycleload.ingestion.schema import (
    RAW_COLUMNS,
    STAGING_TABLE,
    TARGET_COLUMNS,
    target_ddl,
    target_index_name,
    validate_table_name,
)
from cycleload.ingestion.staging import count_staged, stage_csv
from cycleload.service import DatabaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    """Row counts reported at the end of a run."""

    staged: int
    inserted: int = 0
    skipped: int = 0
    target_total: int | None = None


def ensure_target_schema(service: DatabaseService, table: str) -> None:
    """Create the target table and its workstation index if they don't exist."""
    service.execute_ddl(
        target_ddl(table)
        + service.index_ddl(target_index_name(table), table, ["workstation_id"])
    )


def load_staged(
    service: DatabaseService, table: str = STAGING_TABLE, chunk_size: int = 5000
) -> Iterator[list[RawRecord]]:
    """Yield staged rows in file order, chunk_size rows per query.

    Pages by row_num, so only one chunk is held in memory. Must run inside
    the caller's `service.transaction()`.
    """
    table = validate_table_name(table)
    sql = (
        f"SELECT row_num, {', '.join(RAW_COLUMNS)} FROM {table} "
        f"WHERE row_num > {service.placeholder} ORDER BY row_num LIMIT {service.placeholder}"
    )
    last_row_num = 0
    while True:
        rows = service.execute(sql, (last_row_num, chunk_size))
        if not rows:
            return
        last_row_num = rows[-1]["row_num"]
        yield [RawRecord(**{col: row[col] for col in RAW_COLUMNS}) for row in rows]


def count_for_workstation(service: DatabaseService, table: str, workstation_id: int) -> int:
    table = validate_table_name(table)
    with service.transaction():
        rows = service.execute(
            f"SELECT COUNT(*) AS cnt FROM {table} WHERE workstation_id = {service.placeholder}",
            (workstation_id,),
        )
    return int(rows[0]["cnt"])


def import_staged(service: DatabaseService, config: ImportConfig) -> ImportSummary:
    """Normalize staged rows and append the admitted ones to the target table.

    The whole import is one transaction: the target is append-only, so a
    failure must leave it untouched for a clean rerun. Rows without any
    numeric content are counted as skipped.
    """
    if config.target_table is None:
        raise ValueError("import_staged requires a target table")

    ensure_target_schema(service, config.target_table)

    staged = inserted = 0
    with service.transaction():
        for chunk_num, batch in enumerate(
            load_staged(service, config.staging_table, config.chunk_size), start=1
        ):
            rows = []
            for raw in batch:
                record = normalize(raw, config.workstation_id, config.default_oee_ratio)
                if record is not None:
                    rows.append(record.as_row())
            service.batch_insert(config.target_table, TARGET_COLUMNS, rows)
            staged += len(batch)
            inserted += len(rows)
            logger.info(
                "Chunk %d: inserted %d rows, skipped %d (total: %d)",
                chunk_num,
                len(rows),
                len(batch) - len(rows),
                inserted,
            )
    skipped = staged - inserted

    target_total = count_for_workstation(service, config.target_table, config.workstation_id)
    logger.info(
        "Insert into %s completed: %d inserted, %d skipped, %d rows for workstation %d",
        config.target_table,
        inserted,
        skipped,
        target_total,
        config.workstation_id,
    )
    return ImportSummary(
        staged=staged, inserted=inserted, skipped=skipped, target_total=target_total
    )


def run_import(service: DatabaseService, config: ImportConfig) -> ImportSummary:
    """Stage the configured file, then import it if a target table is set."""
    stage_csv(
        service,
        config.file_path,
        config.encoding,
        table=config.staging_table,
        header_rows=config.header_rows,
        delimiter=config.delimiter,
        chunk_size=config.chunk_size,
    )
    staged = count_staged(service, config.staging_table)

    if config.target_table is None:
        logger.warning(
            "No target table set; %d rows left in %s. Rerun with a target table to insert.",
            staged,
            config.staging_table,
        )
        return ImportSummary(staged=staged)

    return import_staged(service, config)
