"""Staging and target table schemas."""

import re

STAGING_TABLE = "cycle_staging"

# Raw CSV columns in file order.
RAW_COLUMNS = [
    "col1",
    "capacity",
    "diameter",
    "thickness",
    "heat_treat_cycle_s",
    "oee",
    "notes",
    "extra",
]
STAGING_COLUMNS = ["row_num", *RAW_COLUMNS]

TARGET_COLUMNS = [
    "workstation_id",
    "diameter_mm",
    "wall_thickness_mm",
    "volume_liters",
    "thread_spec",
    "cycle_time_s",
    "planned_cycle_time_s",
]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def validate_table_name(name: str) -> str:
    """Return name unchanged if it is a plain or schema-qualified SQL identifier."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


def staging_ddl(table: str = STAGING_TABLE) -> str:
    """Drop and recreate the untyped staging table."""
    table = validate_table_name(table)
    raw_cols = ",\n".join(f"    {col:<20} VARCHAR(255) NULL" for col in RAW_COLUMNS)
    return f"""
DROP TABLE IF EXISTS {table};
CREATE TABLE {table} (
    row_num              INTEGER      PRIMARY KEY,
{raw_cols}
);
"""


def target_index_name(table: str) -> str:
    return "idx_" + validate_table_name(table).replace(".", "_") + "_workstation"


def target_ddl(table: str) -> str:
    """Create the destination table if missing; the index is backend-specific."""
    table = validate_table_name(table)
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    workstation_id        BIGINT           NOT NULL,
    diameter_mm           DOUBLE PRECISION NULL,
    wall_thickness_mm     DOUBLE PRECISION NULL,
    volume_liters         DOUBLE PRECISION NULL,
    thread_spec           VARCHAR(255)     NULL,
    cycle_time_s          DOUBLE PRECISION NULL,
    planned_cycle_time_s  DOUBLE PRECISION NULL
);
"""
