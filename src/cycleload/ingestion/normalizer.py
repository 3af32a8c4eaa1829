"""Row normalization: staged raw text -> typed cycle record.

The numeric columns of the cycle export are hand-typed: European decimal
commas, tolerance ranges such as ``140-141`` and shape annotations such as
``elip`` all appear in the same column. Parsing never raises; anything that
cannot be read as a number becomes ``None``, and rows that end up with no
numeric content at all are dropped.
"""

import math
import re
from dataclasses import astuple, dataclass
from typing import Iterable, Iterator, Sequence

DEFAULT_OEE_RATIO = 0.85

# Shape annotation with no numeric meaning ("140 elip").
ANNOTATION_TOKEN = "elip"

_PLAIN_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_UNSIGNED_FLOAT = re.compile(r"^(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class RawRecord:
    """One staged CSV row, eight nullable text fields in file order."""

    col1: str | None = None
    capacity: str | None = None
    diameter: str | None = None
    thickness: str | None = None
    heat_treat_cycle_s: str | None = None
    oee: str | None = None
    notes: str | None = None
    extra: str | None = None

    @classmethod
    def from_fields(cls, fields: Sequence[str | None]) -> "RawRecord":
        """Build from a split row; short rows are padded, surplus fields dropped."""
        padded = list(fields[:8]) + [None] * (8 - len(fields))
        return cls(*padded)


@dataclass(frozen=True)
class TypedRecord:
    """One row of the destination table."""

    workstation_id: int
    diameter_mm: float | None
    wall_thickness_mm: float | None
    volume_liters: float | None
    thread_spec: str | None
    cycle_time_s: float | None
    planned_cycle_time_s: float | None

    def as_row(self) -> tuple:
        """Values in TARGET_COLUMNS order."""
        return astuple(self)


def _to_float(text: str, pattern: re.Pattern = _PLAIN_FLOAT) -> float | None:
    if not pattern.match(text):
        return None
    value = float(text)
    # "1e999" matches the pattern but overflows
    return value if math.isfinite(value) else None


def check_oee_ratio(ratio: float) -> float:
    """Return ratio unchanged if it can divide a cycle time."""
    if not ratio > 0:
        raise ValueError(f"OEE ratio must be positive, got {ratio}")
    return ratio


def parse_plain_numeric(text: str | None) -> float | None:
    """Parse a single number with a decimal comma, e.g. ``"42,5"`` -> 42.5."""
    if text is None or not text.strip():
        return None
    cleaned = text.strip().replace(" ", "").replace(",", ".")
    return _to_float(cleaned)


def parse_numeric_with_range(text: str | None) -> float | None:
    """Parse a number or a ``A-B`` range (returned as its midpoint).

    >>> parse_numeric_with_range("140-141")
    140.5
    >>> parse_numeric_with_range("elip 45")
    45.0

    Only the first hyphen separates the range; both sides must parse or
    the whole field is ``None``.
    """
    if text is None or not text.strip():
        return None
    cleaned = text.strip().replace(ANNOTATION_TOKEN, "").replace(" ", "").replace(",", ".")

    if "-" in cleaned:
        left, right = cleaned.split("-", 1)
        low = _to_float(left, _UNSIGNED_FLOAT)
        high = _to_float(right, _UNSIGNED_FLOAT)
        if low is None or high is None:
            return None
        return low / 2 + high / 2

    return _to_float(cleaned)


def _clean_text(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None


def is_admissible(record: TypedRecord) -> bool:
    """True if the record carries at least one numeric value.

    ``planned_cycle_time_s`` is non-null exactly when the OEE column parsed
    or the cycle time did, so it stands in for the OEE value here.
    """
    return any(
        value is not None
        for value in (
            record.diameter_mm,
            record.wall_thickness_mm,
            record.volume_liters,
            record.cycle_time_s,
            record.planned_cycle_time_s,
        )
    )


def normalize(
    raw: RawRecord,
    workstation_id: int,
    default_oee_ratio: float = DEFAULT_OEE_RATIO,
) -> TypedRecord | None:
    """Map one raw row to a TypedRecord, or None if it has no numeric content.

    The OEE column holds a precomputed planned cycle time when present;
    otherwise the plan is derived from the measured cycle time and
    ``default_oee_ratio``, which must be positive.
    """
    check_oee_ratio(default_oee_ratio)
    cycle_time = parse_plain_numeric(raw.heat_treat_cycle_s)
    planned = parse_plain_numeric(raw.oee)
    if planned is None and cycle_time is not None:
        planned = round(cycle_time / default_oee_ratio, 2)
        if not math.isfinite(planned):
            planned = None

    record = TypedRecord(
        workstation_id=workstation_id,
        diameter_mm=parse_numeric_with_range(raw.diameter),
        wall_thickness_mm=parse_numeric_with_range(raw.thickness),
        volume_liters=parse_numeric_with_range(raw.capacity),
        thread_spec=_clean_text(raw.notes),
        cycle_time_s=cycle_time,
        planned_cycle_time_s=planned,
    )
    if not is_admissible(record):
        return None
    return record


def normalize_all(
    raws: Iterable[RawRecord],
    workstation_id: int,
    default_oee_ratio: float = DEFAULT_OEE_RATIO,
) -> Iterator[TypedRecord]:
    """Lazily normalize a sequence of rows, dropping the inadmissible ones."""
    for raw in raws:
        record = normalize(raw, workstation_id, default_oee_ratio)
        if record is not None:
            yield record
