"""Tests for the ingestion loader."""

import pytest

from suitability_report.ingestion import ReportLoader, ReportType, frame_from_rows
from suitability_report.models import ClassifiedReport


@pytest.fixture
def loader() -> ReportLoader:
    return ReportLoader()


class TestFromRawRows:
    """Tests for raw grids with header location."""

    def test_preamble_and_blank_rows(self, loader: ReportLoader):
        """Rows above the header and blank rows are dropped."""
        grid = [
            ["Disclaimer: internal use only"],
            ["Category Name", "VCR", "CTR", "Impressions"],
            ["Music", "80%", "1.2%", "1,000"],
            ["", "", "", ""],
            ["News", "70%", "0.8%", "500"],
        ]
        report = loader.from_raw_rows(grid, "perf.csv")

        assert report.type is ReportType.PERFORMANCE
        assert report.header_row_index == 1
        assert report.row_count == 2
        assert report.rows[0] == {
            "Category Name": "Music",
            "VCR": "80%",
            "CTR": "1.2%",
            "Impressions": "1,000",
        }

    def test_short_rows_padded(self, loader: ReportLoader):
        """Cells missing at the end of a row become empty strings."""
        grid = [
            ["Placement Name", "Video Suitability", "Impressions"],
            ["Clip A", "Unsuitable"],
        ]
        report = loader.from_raw_rows(grid, "exclusion.csv")
        assert report.type is ReportType.EXCLUSION
        assert report.rows[0]["Impressions"] == ""

    def test_duplicate_header_first_wins(self, loader: ReportLoader):
        """A repeated header name keeps the first column's value."""
        grid = [
            ["Report Date", "Viewability Rate", "Gross Impressions", "Gross Impressions"],
            ["2026-01-01", "70%", "100", "999"],
        ]
        report = loader.from_raw_rows(grid, "view.csv")
        assert report.rows[0]["Gross Impressions"] == "100"
        assert report.headers == ("Report Date", "Viewability Rate", "Gross Impressions")

    def test_unrecognized_file(self, loader: ReportLoader):
        """A file with no known header becomes Unknown with no rows."""
        report = loader.from_raw_rows([["a", "b"], ["1", "2"]], "notes.csv")
        assert report == ClassifiedReport.unknown("notes.csv")
        assert report.row_count == 0
        assert not report.is_recognized


class TestFromTable:
    """Tests for tables whose header was already split off."""

    def test_classified_table(self, loader: ReportLoader):
        """Headers and rows are used directly."""
        headers = ["Report Date", "Viewability Rate", "Gross Impressions", "Device Type"]
        rows = [
            {"Report Date": "2026-01-01", "Viewability Rate": "70%", "Gross Impressions": "100", "Device Type": "OTT"},
            {"Report Date": "", "Viewability Rate": "", "Gross Impressions": "", "Device Type": ""},
        ]
        report = loader.from_table(headers, rows, "anything.xlsx")

        assert report.type is ReportType.VIEWABILITY
        assert report.row_count == 1
        assert report.headers == tuple(headers)

    def test_disclaimer_header_rescanned(self, loader: ReportLoader):
        """A disclaimer in the header position is recovered by rescanning."""
        headers = ["Disclaimer: figures are estimates", "", ""]
        rows = [
            {"Disclaimer: figures are estimates": "Category Name", "": "VCR"},
            {"Disclaimer: figures are estimates": "Music", "": "80%"},
        ]
        report = loader.from_table(headers, rows, "export.xlsx")

        assert report.type is ReportType.PERFORMANCE
        assert report.row_count == 1
        assert report.rows[0]["Category Name"] == "Music"

    def test_unknown_table(self, loader: ReportLoader):
        """An unrecognizable table stays Unknown."""
        report = loader.from_table(["x", "y"], [{"x": "1", "y": "2"}], "data.csv")
        assert report.type is ReportType.UNKNOWN
        assert report.row_count == 0

    def test_filename_hint_with_weak_header(self, loader: ReportLoader):
        """A filename hint confirmed by a weak header signal classifies the table."""
        rows = [{"Date": "2026-01-01", "Device": "OTT"}]
        report = loader.from_table(["Date", "Device"], rows, "viewability.csv")
        assert report.type is ReportType.VIEWABILITY
        assert report.row_count == 1


class TestFrameFromRows:
    """Tests for frame_from_rows."""

    def test_union_of_keys(self):
        """Columns are the union of row keys; missing keys become ""."""
        df = frame_from_rows([{"a": "1"}, {"b": "2"}])
        assert df.columns == ["a", "b"]
        assert df.to_dicts() == [{"a": "1", "b": ""}, {"a": "", "b": "2"}]

    def test_empty(self):
        """No rows gives an empty frame."""
        assert frame_from_rows([]).is_empty()
