"""Run configuration for a cycle import."""

import codecs
from dataclasses import dataclass
from pathlib import Path

from cycleload.ingestion.normalizer import DEFAULT_OEE_RATIO, check_oee_ratio
from cycleload.ingestion.schema import STAGING_TABLE, validate_table_name


@dataclass(frozen=True)
class ImportConfig:
    """Everything one import run needs besides the database connection.

    ``encoding`` has no default: exports come as either cp1250 (Central
    European) or utf-8 and the content alone does not reliably tell which.
    """

    file_path: str | Path
    encoding: str
    workstation_id: int
    target_table: str | None = None
    staging_table: str = STAGING_TABLE
    default_oee_ratio: float = DEFAULT_OEE_RATIO
    header_rows: int = 1
    delimiter: str = ";"
    chunk_size: int = 5000

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {self.encoding!r}") from e
        validate_table_name(self.staging_table)
        if self.target_table is not None:
            validate_table_name(self.target_table)
        check_oee_ratio(self.default_oee_ratio)
        if self.header_rows < 0:
            raise ValueError(f"header_rows must be >= 0, got {self.header_rows}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
