"""Date bucket formatting and series building for statistic result sets.

Every catalog query returns rows with two columns: ``the_date``, a
whitespace-separated two-digit date fragment such as ``"21 05"`` (month
buckets) or ``"21 05 01"`` (day buckets), and ``the_count``. Rows arrive
newest-first because every query orders by the bucket descending.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

Count = int | float | Decimal | None

# The wiki only stores two-digit years in bucket keys
CENTURY = 2000


class Granularity(str, Enum):
    """Report resolutions, always produced together."""

    MONTH = "month"
    DAY = "day"


class FormatError(ValueError):
    """Raised when a bucket key cannot be turned into a calendar date."""


class MalformedBucketKey(FormatError):
    """Raised when a query row carries a bucket key that cannot be formatted."""

    def __init__(self, bucket_key: Any, row_index: int, reason: str):
        self.bucket_key = bucket_key
        self.row_index = row_index
        super().__init__(f"Row {row_index} has malformed date bucket {bucket_key!r}: {reason}")


@dataclass(frozen=True)
class StatRow:
    """A raw aggregate row."""

    bucket_key: str
    count: Count


@dataclass(frozen=True)
class SeriesPoint:
    """A formatted point of a series."""

    label: str
    count: Count


Series = tuple[SeriesPoint, ...]


def _parse_fields(bucket_key: str, needed: int) -> list[int]:
    if not isinstance(bucket_key, str):
        raise FormatError(f"Bucket key must be a string, got {type(bucket_key).__name__}")

    fields = bucket_key.split()
    if len(fields) < needed:
        raise FormatError(f"Expected {needed} fields in bucket key {bucket_key!r}")

    try:
        return [int(field) for field in fields[:needed]]
    except ValueError as exc:
        raise FormatError(f"Non-numeric field in bucket key {bucket_key!r}") from exc


def format_bucket(bucket_key: str, granularity: Granularity) -> str:
    """Convert a raw bucket key into a display label.

    ``"21 05"`` becomes ``"05/21"`` in month mode and ``"21 05 01"`` becomes
    ``"05/01/21"`` in day mode.

    Raises:
        FormatError: If the key is missing fields, has non-numeric fields or
            does not name a real calendar date.
    """
    if granularity == Granularity.MONTH:
        year, month = _parse_fields(bucket_key, 2)
        day = 1
    else:
        year, month, day = _parse_fields(bucket_key, 3)

    if not 0 <= year <= 99:
        raise FormatError(f"Year field out of range in bucket key {bucket_key!r}")
    if not 1 <= month <= 12:
        raise FormatError(f"Month field out of range in bucket key {bucket_key!r}")

    try:
        bucket_date = date(CENTURY + year, month, day)
    except ValueError as exc:
        raise FormatError(f"Invalid date in bucket key {bucket_key!r}: {exc}") from exc

    if granularity == Granularity.MONTH:
        return bucket_date.strftime("%m/%y")
    return bucket_date.strftime("%m/%d/%y")


def to_stat_row(row: Any) -> StatRow:
    """Adapt a result row (mapping or attribute object) to a StatRow."""
    if isinstance(row, StatRow):
        return row
    if isinstance(row, Mapping):
        return StatRow(bucket_key=row["the_date"], count=row["the_count"])
    return StatRow(bucket_key=row.the_date, count=row.the_count)


def build_series(rows: Iterable[Any], granularity: Granularity) -> Series:
    """Turn raw query rows into a newest-first series of labelled points.

    Row order and counts are preserved verbatim; the query has already
    grouped and sorted.

    Raises:
        MalformedBucketKey: If any row's bucket key cannot be formatted.
    """
    points = []
    for index, row in enumerate(rows):
        stat_row = to_stat_row(row)
        try:
            label = format_bucket(stat_row.bucket_key, granularity)
        except FormatError as exc:
            raise MalformedBucketKey(stat_row.bucket_key, index, str(exc)) from exc
        points.append(SeriesPoint(label=label, count=stat_row.count))
    return tuple(points)
