"""Tests for the text report and DataFrame view."""

import pandas as pd
from pydantic import ValidationError
import pytest

from hstats.histogram import HistogramAccumulator
from hstats.numeric import DECIMAL
from hstats.rendering import (
    MAX_BAR_SIZE,
    DisplayConfig,
    HistogramRenderer,
    histogram_to_dataframe,
    render_histogram,
)


@pytest.fixture
def small_histogram():
    """Two bins over [0, 2) with one underflow sample."""
    hist = HistogramAccumulator(0.0, 2.0, 2)
    for value in (0.5, 0.75, 1.5, -1.0):
        hist.add(value)
    return hist.with_bar_char("#")


class TestReportLayout:
    """Exact text of the report."""

    def test_small_histogram(self, small_histogram):
        expected = "\n".join(
            [
                "Start | End ",
                "------|------",
                " -inf | 0.00 | " + "#" * 30 + " 1 (25.00%)",
                " 0.00 | 1.00 | " + "#" * 60 + " 2 (50.00%)",
                " 1.00 | 2.00 | " + "#" * 30 + " 1 (25.00%)",
                " 2.00 |  inf |  0 (0.00%)",
                "",
                "Total Count: 4 Min: -1.00 Max: 1.50 Mean: 0.44 Std Dev: 1.05",
                "",
            ]
        )
        assert render_histogram(small_histogram) == expected

    def test_str_uses_accumulator_settings(self, small_histogram):
        assert str(small_histogram) == render_histogram(small_histogram)

    def test_row_count(self, unit_histogram):
        lines = str(unit_histogram).splitlines()
        # header, rule, bin_count + 2 rows, blank, summary
        assert len(lines) == 2 + unit_histogram.bin_count + 2 + 2

    def test_columns_align(self):
        hist = HistogramAccumulator(-1000.0, 10.0, 5)
        hist.add_many([-999.0, -500.0, 0.0, 5.0])
        rows = str(hist).splitlines()[2:-2]
        separators = {row.index(" | ") for row in rows}
        assert len(separators) == 1

    def test_header_aligned_with_narrow_columns(self, small_histogram):
        lines = render_histogram(small_histogram).splitlines()
        assert lines[0].index(" | ") == lines[2].index(" | ")
        assert lines[1].index("|") == lines[2].index("|")

    def test_precision(self, small_histogram):
        text = render_histogram(small_histogram, DisplayConfig(precision=0, bar_char="="))
        assert "    0 |   1 | " + "=" * 60 + " 2 (50.00%)" in text
        assert "Total Count: 4 Min: -1 Max: 2 Mean: 0 Std Dev: 1" in text

    def test_config_overrides_accumulator(self, small_histogram):
        text = render_histogram(small_histogram, DisplayConfig(bar_char="*", max_bar_size=10))
        assert "*" * 10 + " 2 (50.00%)" in text
        assert "#" not in text


class TestEdgeCases:
    """Empty and lopsided histograms."""

    def test_empty_histogram(self, unit_histogram):
        text = str(unit_histogram)
        assert "Total Count: 0 Min: inf Max: -inf Mean: 0.00 Std Dev: 0.00" in text
        assert text.count("(0.00%)") == unit_histogram.bin_count + 2

    def test_bar_capped_when_underflow_dominates(self):
        hist = HistogramAccumulator(0.0, 1.0, 2).with_bar_char("#")
        hist.add_many([-5.0] * 50 + [0.1])
        lines = str(hist).splitlines()
        underflow_row = lines[2]
        assert underflow_row.count("#") == MAX_BAR_SIZE
        assert all(line.count("#") <= MAX_BAR_SIZE for line in lines)

    def test_decimal_histogram(self):
        hist = HistogramAccumulator("0", "1", 2, numeric=DECIMAL).with_precision(1)
        hist.add("0.25")
        text = str(hist)
        assert "-Infinity |" in text
        assert "| Infinity |" in text
        assert " 1 (100.00%)" in text


class TestScaling:
    """Bar length and percentage arithmetic."""

    @pytest.mark.parametrize(
        "count, max_count, expected", [(0, 10, 0), (10, 10, 60), (5, 10, 30), (1, 3, 20), (3, 0, 0)]
    )
    def test_bar_length(self, count, max_count, expected):
        assert HistogramRenderer.bar_length(count, max_count) == expected

    def test_bar_length_custom_size(self):
        assert HistogramRenderer.bar_length(1, 4, size=8) == 2

    def test_percent(self):
        assert HistogramRenderer.percent(1, 4) == 25.0
        assert HistogramRenderer.percent(0, 0) == 0.0


class TestDisplayConfig:
    """Validation of display settings."""

    def test_defaults(self):
        config = DisplayConfig()
        assert config.precision == 2
        assert config.bar_char == "░"
        assert config.max_bar_size == MAX_BAR_SIZE

    @pytest.mark.parametrize(
        "kwargs", [{"precision": -1}, {"bar_char": ""}, {"max_bar_size": 0}]
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            DisplayConfig(**kwargs)


class TestDataFrame:
    """DataFrame view of the bins."""

    def test_shape_and_totals(self, small_histogram):
        df = histogram_to_dataframe(small_histogram)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["lower", "upper", "count", "percent"]
        assert len(df) == small_histogram.bin_count + 2
        assert df["count"].sum() == small_histogram.count
        assert df["percent"].sum() == pytest.approx(100.0)

    def test_bounds(self, small_histogram):
        df = histogram_to_dataframe(small_histogram)
        assert df["lower"].iloc[0] == float("-inf")
        assert df["upper"].iloc[-1] == float("inf")
        assert df["upper"].iloc[1] == df["lower"].iloc[2]
