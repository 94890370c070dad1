"""Tests for header-row location and column lookup."""

import polars as pl

from suitability_report.ingestion import (
    find_column,
    find_header_row,
    find_semantic_column,
    first_present_expr,
    resolve_column,
)
from suitability_report.settings import ColumnSpec

SUITABILITY_HEADER = [
    "Report Date",
    "Brand Suitability %",
    "Suitable Impressions",
    "Total Impressions",
]


def suitability_grid(preamble: list[list[str]], data_rows: int = 38) -> list[list[str]]:
    rows = [list(r) for r in preamble]
    rows.append(list(SUITABILITY_HEADER))
    for i in range(data_rows):
        rows.append([f"2026-01-{i % 28 + 1:02d}", "90%", "900", "1,000"])
    return rows


class TestFindHeaderRow:
    """Tests for find_header_row."""

    def test_disclaimer_row_is_skipped(self):
        """A 40-row file with a disclaimer first finds the header at index 1."""
        grid = suitability_grid([["Disclaimer: this report is confidential"]])
        assert len(grid) == 40
        assert find_header_row(grid) == 1

    def test_header_first(self):
        """No preamble means index 0."""
        assert find_header_row(suitability_grid([])) == 0

    def test_blank_and_title_rows(self):
        """Blank and title rows above the header are skipped."""
        grid = suitability_grid([[], ["", ""], ["Campaign Quality Report"]])
        assert find_header_row(grid) == 3

    def test_japanese_disclaimer(self):
        """Markers are matched in any cell of the row."""
        grid = suitability_grid([["", "免責事項: Suitable Impressions are estimates"]])
        assert find_header_row(grid) == 1

    def test_not_found(self):
        """No recognizable header returns None."""
        grid = [["a", "b"], ["1", "2"]]
        assert find_header_row(grid) is None

    def test_scan_limit(self):
        """A header beyond the scan bound is not found."""
        grid = suitability_grid([["note"]] * 30)
        assert find_header_row(grid) is None
        assert find_header_row(grid, scan_limit=31) == 30

    def test_none_cells(self):
        """None cells are treated as empty."""
        grid = [[None, None], [None, *SUITABILITY_HEADER]]
        assert find_header_row(grid) == 1


class TestColumnLookup:
    """Tests for exact and semantic column lookup."""

    def test_semantic_case_insensitive(self):
        """Keywords match any case and inner spacing."""
        headers = ["Date", "VCR%", "Click  Through Rate"]
        assert find_semantic_column(headers, ["vcr"]) == "VCR%"
        assert find_semantic_column(headers, ["click through"]) == "Click  Through Rate"
        assert find_semantic_column(headers, ["missing"]) is None

    def test_semantic_header_order_wins(self):
        """The first matching header is returned, not the first keyword."""
        headers = ["Viewability Rate", "VCR"]
        assert find_semantic_column(headers, ["vcr", "viewability"]) == "Viewability Rate"

    def test_exact_match_name_order(self):
        """Candidate names are tried in order."""
        headers = ["impressions", "GROSS IMPRESSIONS"]
        assert find_column(headers, ["Gross Impressions", "Impressions"]) == "GROSS IMPRESSIONS"
        assert find_column(headers, ["Total Impressions"]) is None

    def test_exact_does_not_match_substring(self):
        """Exact lookup ignores longer headers containing the name."""
        assert find_column(["Suitable Impressions"], ["Impressions"]) is None

    def test_resolve_falls_back_to_keywords(self):
        """resolve_column uses keywords when no exact name matches."""
        spec = ColumnSpec(exact=("CTR",), keywords=("click through",))
        assert resolve_column(["Click Through Rate"], spec) == "Click Through Rate"
        assert resolve_column(["ctr ", "Click Through Rate"], spec) == "ctr "


class TestFirstPresent:
    """Tests for per-row first-match-wins lookup."""

    def test_per_row_fallback(self):
        """Each row takes the first candidate with a non-blank cell."""
        df = pl.DataFrame(
            {
                "Total Impressions": ["100", "", "  "],
                "Gross Impressions": ["999", "200", ""],
            }
        )
        expr = first_present_expr(df.columns, ["Total Impressions", "Gross Impressions"])
        assert df.select(expr).to_series().to_list() == ["100", "200", None]

    def test_no_candidates(self):
        """Returns None when no candidate column exists."""
        assert first_present_expr(["a"], ["Total Impressions"]) is None
