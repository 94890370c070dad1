"""Tests for cell cleaning: numbers, percentages and dates."""

import math

import polars as pl
import pytest

from suitability_report.ingestion import (
    clean_number,
    clean_number_expr,
    clean_percent_expr,
    rescale_percent,
    sortable_date_expr,
    to_sortable_date,
)


# =============================================================================
# NUMBERS
# =============================================================================


class TestCleanNumber:
    """Tests for clean_number / clean_number_expr."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("98%", 98.0),
            ("0.98", 0.98),
            ("1,234", 1234.0),
            ("50M", 50_000_000.0),
            ("0.5M", 500_000.0),
            ("2.5K", 2_500.0),
            ("3k", 3_000.0),
            ("$100", 100.0),
            ("¥1,500", 1500.0),
            (" 42 ", 42.0),
            ("-7.5", -7.5),
            ("12.5abc", 12.5),
        ],
    )
    def test_encodings(self, raw, expected):
        """Mixed numeric encodings parse to the same float."""
        assert clean_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "N/A", "n/a", "NA", "-", "   ", "abc", "%", "$", None])
    def test_missing_and_garbage_is_zero(self, raw):
        """Missing tokens and unparseable text become 0."""
        assert clean_number(raw) == 0.0

    @pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e999", float("inf"), float("nan")])
    def test_never_non_finite(self, raw):
        """Non-finite results collapse to 0."""
        result = clean_number(raw)
        assert math.isfinite(result)
        assert result == 0.0

    def test_numbers_pass_through(self):
        """int and float inputs are used as-is."""
        assert clean_number(5) == 5.0
        assert clean_number(0.25) == 0.25
        assert clean_number(True) == 0.0

    @pytest.mark.parametrize("raw", ["1234", "0.5", "98", "50000000", "1e3"])
    def test_round_trip_stable(self, raw):
        """Cleaning the string form of a cleaned number is a no-op."""
        once = clean_number(raw)
        assert clean_number(str(once)) == once

    def test_expression_on_column(self):
        """The expression form cleans a whole column."""
        df = pl.DataFrame({"v": ["1,000", "50M", None, "N/A", "9%"]})
        result = df.select(clean_number_expr(pl.col("v"))).to_series().to_list()
        assert result == [1000.0, 50_000_000.0, 0.0, 0.0, 9.0]


# =============================================================================
# PERCENTAGES
# =============================================================================


class TestRescalePercent:
    """Tests for the fraction-to-percent rule."""

    @pytest.mark.parametrize("r", [0.01, 0.5, 0.98, 1.0])
    def test_fraction_scaled(self, r):
        """Values in (0, 1] are multiplied by 100."""
        assert rescale_percent(r) == pytest.approx(100 * r)

    @pytest.mark.parametrize("r", [1.5, 50.0, 98.0, 100.0])
    def test_already_scaled_unchanged(self, r):
        """Values above 1 pass through."""
        assert rescale_percent(r) == r

    @pytest.mark.parametrize("r", [0.0, -0.5, -20.0])
    def test_non_positive_unchanged(self, r):
        """Zero and negatives pass through."""
        assert rescale_percent(r) == r

    def test_clean_percent_applies_once(self):
        """Both 98% and 0.98 end up at 98, not 9800."""
        df = pl.DataFrame({"v": ["98%", "0.98", "98", "0", ""]})
        result = df.select(clean_percent_expr(pl.col("v"))).to_series().to_list()
        assert result == pytest.approx([98.0, 98.0, 98.0, 0.0, 0.0])

    def test_small_percent_sign_values_rescaled(self):
        """The fraction rule applies whether or not the cell has a "%" sign."""
        df = pl.DataFrame({"v": ["0.5%", "1%", "0.5", "0.9 %"]})
        result = df.select(clean_percent_expr(pl.col("v"))).to_series().to_list()
        assert result == pytest.approx([50.0, 100.0, 50.0, 90.0])


# =============================================================================
# DATES
# =============================================================================


class TestSortableDate:
    """Tests for date normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2026-01-05", "2026-01-05"),
            ("2026-1-5", "2026-01-05"),
            ("2026-01-05 13:45:00", "2026-01-05"),
            ("2026-01-05T00:00:00Z", "2026-01-05"),
            ("1/5/2026", "2026-01-05"),
            ("12/31/2025", "2025-12-31"),
        ],
    )
    def test_recognized_formats(self, raw, expected):
        """ISO and US dates become YYYY-MM-DD."""
        assert to_sortable_date(raw) == expected

    def test_unrecognized_passthrough(self):
        """Other text is returned trimmed."""
        assert to_sortable_date("  Week 3 ") == "Week 3"

    def test_blank(self):
        """Blank and None become the empty string."""
        assert to_sortable_date("") == ""
        assert to_sortable_date(None) == ""

    def test_sort_order(self):
        """Normalized keys sort chronologically as strings."""
        df = pl.DataFrame({"d": ["1/10/2026", "2026-01-09", "12/31/2025"]})
        result = df.select(sortable_date_expr(pl.col("d"))).to_series().sort().to_list()
        assert result == ["2025-12-31", "2026-01-09", "2026-01-10"]
