"""
Series assembly tests.
"""

import math

import pandas as pd

from voldash.data.series import (
    ChartRow,
    VolatilityObservation,
    chart_frame,
    format_vol,
    latest_per_symbol,
    to_chart_rows,
)


class TestLatestPerSymbol:
    """Test latest observation extraction."""

    def test_latest_per_symbol(self, sample_observations):
        """Should keep the newest observation for each symbol."""
        latest = latest_per_symbol(sample_observations)

        assert latest["VIX"].close == 22.0
        assert latest["VIX"].date == "2024-01-02"
        assert latest["NIKKEI_VI"].close == 18.0
        assert latest["NIKKEI_VI"].date == "2024-01-01"

    def test_input_order_does_not_matter(self, sample_observations):
        """Should pick by date, not by position."""
        latest = latest_per_symbol(reversed(sample_observations))
        assert latest["VIX"].date == "2024-01-02"

    def test_tie_last_seen_wins(self):
        """Should keep the later of two rows with the same date."""
        observations = [
            VolatilityObservation("2024-01-02", "VIX", 21.0),
            VolatilityObservation("2024-01-02", "VIX", 21.5),
        ]
        assert latest_per_symbol(observations)["VIX"].close == 21.5

    def test_empty(self):
        """Should return an empty mapping for no observations."""
        assert latest_per_symbol([]) == {}


class TestToChartRows:
    """Test per-date reshaping."""

    def test_groups_by_date(self, sample_observations):
        """Should merge symbols sharing a date into one row."""
        rows = to_chart_rows(sample_observations)

        assert [row.to_dict() for row in rows] == [
            {"date": "2024-01-01", "VIX": 20.0, "NIKKEI_VI": 18.0},
            {"date": "2024-01-02", "VIX": 22.0},
        ]

    def test_missing_symbol_is_absent(self, sample_observations):
        """Should leave a missing symbol out instead of using zero."""
        second = to_chart_rows(sample_observations)[1]
        assert "NIKKEI_VI" not in second.to_dict()
        assert second.get("NIKKEI_VI") is None

    def test_sorted_ascending(self):
        """Should sort rows by date."""
        observations = [
            VolatilityObservation("2024-02-01", "VIX", 15.0),
            VolatilityObservation("2023-12-29", "VIX", 12.5),
            VolatilityObservation("2024-01-15", "NIKKEI_VI", 19.0),
        ]
        dates = [row.date for row in to_chart_rows(observations)]
        assert dates == ["2023-12-29", "2024-01-15", "2024-02-01"]

    def test_duplicate_last_write_wins(self):
        """Should keep the last close for a repeated date and symbol."""
        observations = [
            VolatilityObservation("2024-01-01", "VIX", 20.0),
            VolatilityObservation("2024-01-01", "VIX", 20.7),
        ]
        rows = to_chart_rows(observations)
        assert len(rows) == 1
        assert rows[0].get("VIX") == 20.7

    def test_pure(self, sample_observations):
        """Should give equal output for equal input."""
        assert to_chart_rows(sample_observations) == to_chart_rows(
            sample_observations
        )


class TestChartFrame:
    """Test DataFrame conversion."""

    def test_columns_and_index(self, sample_observations):
        """Should index by date with one column per symbol."""
        frame = chart_frame(to_chart_rows(sample_observations))

        assert list(frame.columns) == ["VIX", "NIKKEI_VI"]
        assert list(frame.index) == ["2024-01-01", "2024-01-02"]
        assert frame.index.name == "date"

    def test_gaps_stay_nan(self, sample_observations):
        """Should keep gaps as NaN by default."""
        frame = chart_frame(to_chart_rows(sample_observations))
        assert math.isnan(frame.loc["2024-01-02", "NIKKEI_VI"])

    def test_connect_gaps_fills_interior_only(self):
        """Should bridge interior gaps and leave trailing gaps empty."""
        rows = [
            ChartRow("2024-01-01", {"VIX": 10.0, "NIKKEI_VI": 20.0}),
            ChartRow("2024-01-02", {"VIX": 12.0}),
            ChartRow("2024-01-03", {"VIX": 14.0, "NIKKEI_VI": 24.0}),
            ChartRow("2024-01-04", {"VIX": 16.0}),
        ]
        frame = chart_frame(rows, connect_gaps=True)

        assert frame.loc["2024-01-02", "NIKKEI_VI"] == 22.0
        assert pd.isna(frame.loc["2024-01-04", "NIKKEI_VI"])

    def test_empty(self):
        """Should build an empty frame for no rows."""
        frame = chart_frame([])
        assert frame.empty
        assert list(frame.columns) == ["VIX", "NIKKEI_VI"]


class TestFormatVol:
    """Test value formatting."""

    def test_two_decimals(self):
        """Should format with two decimals."""
        assert format_vol(13.456) == "13.46"
        assert format_vol(20) == "20.00"

    def test_missing(self):
        """Should render missing values as a dash."""
        assert format_vol(None) == "-"
        assert format_vol(float("nan")) == "-"
