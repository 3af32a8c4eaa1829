"""CLI entry point for the cycle CSV import.

Usage:
    python -m scripts.import_cycles --db-url sqlite:///data.db --file cycles.csv \
        --encoding cp1250 --workstation-id 1 [--target-table vyroba_parametry]
"""

import argparse
import logging
import os
import sys

from cycleload import create_service
from cycleload.ingestion import ImportConfig, StagingLoadError, run_import
from cycleload.ingestion.normalizer import DEFAULT_OEE_RATIO
from cycleload.ingestion.schema import STAGING_TABLE
from cycleload.ingestion.staging import preview_staged

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import a cycle-time CSV export into the database")
    parser.add_argument(
        "--db-url",
        default=os.environ.get("CYCLELOAD_DB_URL"),
        help="Database URL (sqlite:/// or postgresql://); defaults to $CYCLELOAD_DB_URL",
    )
    parser.add_argument("--file", required=True, help="Path to the semicolon-delimited CSV file")
    parser.add_argument(
        "--encoding",
        required=True,
        help="File encoding, e.g. cp1250 (Central European) or utf-8",
    )
    parser.add_argument("--workstation-id", type=int, required=True, help="Workstation id")
    parser.add_argument(
        "--target-table", help="Destination table; without it the file is only staged"
    )
    parser.add_argument("--staging-table", default=STAGING_TABLE, help="Staging table name")
    parser.add_argument(
        "--oee-ratio",
        type=float,
        default=DEFAULT_OEE_RATIO,
        help="OEE ratio used when the planned cycle time is missing",
    )
    parser.add_argument("--header-rows", type=int, default=1, help="Header records to skip")
    parser.add_argument("--chunk-size", type=int, default=5000, help="Rows per transaction chunk")
    parser.add_argument(
        "--preview", type=int, default=0, metavar="N", help="Log the first N staged rows"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not args.db_url:
        logger.error("No database URL. Pass --db-url or set CYCLELOAD_DB_URL.")
        sys.exit(1)

    try:
        config = ImportConfig(
            file_path=args.file,
            encoding=args.encoding,
            workstation_id=args.workstation_id,
            target_table=args.target_table,
            staging_table=args.staging_table,
            default_oee_ratio=args.oee_ratio,
            header_rows=args.header_rows,
            chunk_size=args.chunk_size,
        )
        service = create_service(args.db_url)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    service.connect()
    try:
        summary = run_import(service, config)
        if args.preview:
            for row in preview_staged(service, config.staging_table, args.preview):
                logger.info("Staged: %s", row)
        logger.info(
            "Done. staged=%d inserted=%d skipped=%d",
            summary.staged,
            summary.inserted,
            summary.skipped,
        )
    except StagingLoadError as e:
        logger.error("%s", e)
        sys.exit(1)
    finally:
        service.close()


if __name__ == "__main__":
    main()
