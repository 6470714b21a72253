"""Chart data encoding for the external line-chart image service.

Uses the service's "simple encoding": each data point becomes one symbol
from a 62-character alphabet, scaled against the series maximum, and the
whole string is prefixed with ``s:``.
"""

import math
from dataclasses import dataclass
from urllib.parse import urlencode

from sitemetrics.core.config import settings
from sitemetrics.services.messages import NumberFormatter, format_number, is_number
from sitemetrics.services.series import Series

SIMPLE_ENCODING = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
MISSING_VALUE = "_"
ENCODING_PREFIX = "s:"


@dataclass(frozen=True)
class ChartData:
    """Encoded chart data plus the axis labels."""

    encoded: str
    first_label: str
    last_label: str
    max_label: str

    def image_url(
        self,
        base_url: str | None = None,
        width: int | None = None,
        height: int | None = None,
        color: str | None = None,
    ) -> str:
        """Build the chart image URL, defaulting to the configured service."""
        params = {
            "chs": f"{width or settings.chart_width}x{height or settings.chart_height}",
            "cht": "lc",
            "chd": self.encoded,
            "chco": color or settings.chart_color,
            "chg": "20,50,1,5",
            "chxt": "x,y",
            "chxl": f"0:|{self.first_label}|{self.last_label}|1:||{self.max_label}",
        }
        return f"{base_url or settings.chart_service_url}?{urlencode(params, safe=':|,/')}"


def series_max(series: Series):
    """Largest numeric count in the series, 0 when there is none."""
    return max((point.count for point in series if is_number(point.count)), default=0)


def encode_value(count, max_value) -> str:
    """Map one count onto the encoding alphabet.

    Counts that are negative or not numeric, and every count when the
    maximum is zero, become the missing-value placeholder.
    """
    if not is_number(count) or count < 0 or max_value <= 0:
        return MISSING_VALUE
    scaled = (len(SIMPLE_ENCODING) - 1) * float(count) / float(max_value)
    # Round half up, as the chart service's own JavaScript encoder does
    return SIMPLE_ENCODING[math.floor(scaled + 0.5)]


def encode_chart(series: Series, number_format: NumberFormatter = format_number) -> ChartData:
    """Encode a newest-first series as oldest-first chart data."""
    oldest_first = tuple(reversed(series))
    max_value = series_max(oldest_first)

    encoded = ENCODING_PREFIX + "".join(
        encode_value(point.count, max_value) for point in oldest_first
    )

    return ChartData(
        encoded=encoded,
        first_label=oldest_first[0].label if oldest_first else "",
        last_label=oldest_first[-1].label if oldest_first else "",
        max_label=number_format(max_value),
    )
