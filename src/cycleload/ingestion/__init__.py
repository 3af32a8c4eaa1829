"""Cycle CSV ingestion: staging load, row normalization and target import."""

from cycleload.ingestion.config import ImportConfig
from cycleload.ingestion.importer import ImportSummary, import_staged, run_import
from cycleload.ingestion.normalizer import (
    RawRecord,
    TypedRecord,
    normalize,
    normalize_all,
    parse_numeric_with_range,
    parse_plain_numeric,
)
from cycleload.ingestion.staging import StagingLoadError, stage_csv

__all__ = [
    "ImportConfig",
    "ImportSummary",
    "RawRecord",
    "StagingLoadError",
    "TypedRecord",
    "import_staged",
    "normalize",
    "normalize_all",
    "parse_numeric_with_range",
    "parse_plain_numeric",
    "run_import",
    "stage_csv",
]
