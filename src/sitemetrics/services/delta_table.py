"""Period-over-period table rows for a series."""

from dataclasses import dataclass

from sitemetrics.services.messages import NumberFormatter, format_number, is_number, plain_number
from sitemetrics.services.series import Count, Series


@dataclass(frozen=True)
class TableRow:
    """One displayed row: bucket label, formatted count, change from the previous bucket."""

    label: str
    formatted_count: str
    delta: str


def format_delta(current: Count, previous: Count) -> str:
    """Render ``current - previous`` with an explicit sign for increases."""
    if not (is_number(current) and is_number(previous)):
        return ""
    diff = plain_number(current - previous)
    if diff > 0:
        return f"+{diff}"
    return f"{diff}"


def build_delta_table(series: Series, number_format: NumberFormatter = format_number) -> list[TableRow]:
    """Build table rows for a newest-first series.

    Each row's delta compares it with the next (older) row; the oldest row
    has nothing to compare against and gets an empty delta.
    """
    rows = []
    for index, point in enumerate(series):
        delta = ""
        if index < len(series) - 1:
            delta = format_delta(point.count, series[index + 1].count)
        rows.append(
            TableRow(
                label=point.label,
                formatted_count=number_format(point.count),
                delta=delta,
            )
        )
    return rows
