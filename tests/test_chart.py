"""Tests for chart data encoding."""

from decimal import Decimal

from sitemetrics.services.chart import (
    MISSING_VALUE,
    SIMPLE_ENCODING,
    ChartData,
    encode_chart,
    encode_value,
)
from sitemetrics.services.series import SeriesPoint


def make_series(*counts, labels=None):
    """Newest-first series with month labels counting down from 12/21."""
    labels = labels or [f"{12 - index:02d}/21" for index in range(len(counts))]
    return tuple(SeriesPoint(label=label, count=count) for label, count in zip(labels, counts))


class TestEncodeValue:
    """Tests for single value encoding."""

    def test_zero_maps_to_first_symbol(self):
        """A zero count should map to the first symbol."""
        assert encode_value(0, 10) == "A"

    def test_max_maps_to_last_symbol(self):
        """The maximum count should map to the last symbol."""
        assert encode_value(10, 10) == "9"

    def test_half_rounds_up(self):
        """Exact halves should round up, not to even."""
        # 61 * 1 / 2 = 30.5
        assert encode_value(1, 2) == SIMPLE_ENCODING[31]

    def test_invalid_values_are_missing(self):
        """Negative and non-numeric counts should use the placeholder."""
        assert encode_value(-1, 10) == MISSING_VALUE
        assert encode_value(None, 10) == MISSING_VALUE
        assert encode_value("n/a", 10) == MISSING_VALUE

    def test_zero_max_is_missing(self):
        """Nothing can be scaled against a zero maximum."""
        assert encode_value(0, 0) == MISSING_VALUE


class TestEncodeChart:
    """Tests for series chart encoding."""

    def test_encodes_oldest_first(self):
        """Chart data should run from the oldest bucket to the newest."""
        series = make_series(10, 4, 4, labels=["05/21", "04/21", "03/21"])

        chart = encode_chart(series)

        assert chart.encoded == "s:YY9"
        assert chart.first_label == "03/21"
        assert chart.last_label == "05/21"
        assert chart.max_label == "10"

    def test_one_symbol_per_point(self):
        """The encoded string should carry exactly one symbol per point."""
        series = make_series(*range(12))

        chart = encode_chart(series)

        assert chart.encoded.startswith("s:")
        assert len(chart.encoded) == 2 + 12
        assert all(symbol in SIMPLE_ENCODING for symbol in chart.encoded[2:])

    def test_symbols_are_monotonic(self):
        """Larger counts should never get smaller symbols."""
        series = make_series(100, 75, 50, 25, 10, 0)

        symbols = encode_chart(series).encoded[2:]

        indexes = [SIMPLE_ENCODING.index(symbol) for symbol in symbols]
        assert indexes == sorted(indexes)

    def test_empty_series(self):
        """An empty series should encode to the bare prefix."""
        chart = encode_chart(())

        assert chart == ChartData(encoded="s:", first_label="", last_label="", max_label="0")

    def test_all_zero_series(self):
        """A series whose maximum is zero should be all placeholders."""
        chart = encode_chart(make_series(0, 0, 0))

        assert chart.encoded == "s:___"
        assert chart.max_label == "0"

    def test_invalid_points_do_not_break_encoding(self):
        """Missing and negative counts should be placeholders among valid symbols."""
        chart = encode_chart(make_series(5, None, -1))

        assert chart.encoded == "s:__9"
        assert chart.max_label == "5"

    def test_decimal_counts(self):
        """Decimal counts (e.g. halved relationship counts) should encode."""
        chart = encode_chart(make_series(Decimal("2.5"), Decimal("5.0")))

        assert chart.encoded == "s:9f"
        assert chart.max_label == "5"

    def test_max_label_is_formatted(self):
        """The axis maximum should use the display number format."""
        chart = encode_chart(make_series(1234, 1))

        assert chart.max_label == "1,234"


class TestChartImageUrl:
    """Tests for the chart image URL."""

    def test_url_parameters(self):
        """The URL should carry size, data, colour, grid and axis labels."""
        chart = ChartData(encoded="s:AB9", first_label="03/21", last_label="05/21", max_label="10")

        url = chart.image_url("http://chart.example/chart", 400, 200, "ff0000")

        assert url.startswith("http://chart.example/chart?")
        assert "chs=400x200" in url
        assert "cht=lc" in url
        assert "chd=s:AB9" in url
        assert "chco=ff0000" in url
        assert "chg=20,50,1,5" in url
        assert "chxt=x,y" in url
        assert "chxl=0:|03/21|05/21|1:||10" in url

    def test_url_defaults_from_settings(self):
        """Without arguments the configured chart service should be used."""
        from sitemetrics.core.config import settings

        chart = ChartData(encoded="s:A", first_label="05/21", last_label="05/21", max_label="0")

        url = chart.image_url()

        assert url.startswith(f"{settings.chart_service_url}?")
        assert f"chs={settings.chart_width}x{settings.chart_height}" in url
