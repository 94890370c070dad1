"""Turn tokenized files into classified row-sets."""

import logging
from typing import Any, Iterable, Mapping, Sequence

import polars as pl

from ..models.report import ClassifiedReport, RawRow
from ..settings import ReportSettings, load_settings
from .classifier import ReportType, classify_source
from .header_matcher import find_header_row

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _is_blank_row(cells: Sequence[Any]) -> bool:
    return all(_cell(c).strip() == "" for c in cells)


def row_headers(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of row keys in first-seen order, blank names dropped."""
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            if _cell(key).strip():
                seen.setdefault(_cell(key), None)
    return list(seen)


def frame_from_rows(
    rows: Sequence[Mapping[str, Any]], headers: Sequence[str] | None = None
) -> pl.DataFrame:
    """Build an all-string DataFrame from raw rows.

    Missing keys become "". Column order follows `headers` when given,
    otherwise the first-seen order of row keys.
    """
    columns = list(dict.fromkeys(headers)) if headers is not None else row_headers(rows)
    columns = [c for c in columns if c.strip()]
    data = {c: [_cell(row.get(c)) for row in rows] for c in columns}
    return pl.DataFrame(data, schema={c: pl.Utf8 for c in columns})


class ReportLoader:
    """Locate headers, classify, and package rows as ClassifiedReport.

    Accepts both tokenizer shapes:
        loader.from_raw_rows(grid, "risk.csv")            # header not located yet
        loader.from_table(headers, rows, "report.xlsx")   # header already split off
    """

    def __init__(self, settings: ReportSettings | None = None):
        self.settings = settings or load_settings()

    def from_raw_rows(
        self, raw_rows: Sequence[Sequence[Any]], source_name: str
    ) -> ClassifiedReport:
        """Classify a raw grid, skipping any preamble above the header.

        Returns an UNKNOWN report when no header is found within the scan
        bound.
        """
        header_index = find_header_row(
            raw_rows,
            scan_limit=self.settings.header_scan_limit,
            disclaimer_markers=self.settings.disclaimer_markers,
        )
        if header_index is None:
            logger.warning("Dropping %s: no recognizable header row", source_name)
            return ClassifiedReport.unknown(source_name)

        header_cells = [_cell(c) for c in raw_rows[header_index]]
        rows: list[RawRow] = []
        for raw in raw_rows[header_index + 1 :]:
            if not raw or _is_blank_row(raw):
                continue
            row: dict[str, str] = {}
            for i, header in enumerate(header_cells):
                if not header.strip() or header in row:
                    continue
                row[header] = _cell(raw[i]) if i < len(raw) else ""
            rows.append(row)

        headers = [h for h in dict.fromkeys(header_cells) if h.strip()]
        report_type = classify_source(headers, source_name, self.settings.filename_hints)
        logger.info(
            "Classified %s as %s (header row %d, %d rows)",
            source_name,
            report_type.value,
            header_index,
            len(rows),
        )
        return ClassifiedReport(
            type=report_type,
            rows=tuple(rows),
            headers=tuple(headers),
            source_name=source_name,
            header_row_index=header_index,
        )

    def from_table(
        self,
        headers: Sequence[Any],
        rows: Sequence[Mapping[str, Any]],
        source_name: str,
    ) -> ClassifiedReport:
        """Classify a table whose header row was taken by the tokenizer.

        If the given headers do not classify (for example a spreadsheet whose
        first line is a disclaimer), the header plus data rows are rescanned
        as a raw grid.
        """
        header_names = [_cell(h) for h in headers]
        clean_rows = [
            {_cell(k): _cell(v) for k, v in row.items()}
            for row in rows
            if not _is_blank_row(list(row.values()))
        ]

        report_type = classify_source(header_names, source_name, self.settings.filename_hints)
        if report_type is ReportType.UNKNOWN:
            return self._rescan(header_names, clean_rows, source_name)

        logger.info(
            "Classified %s as %s (%d rows)", source_name, report_type.value, len(clean_rows)
        )
        return ClassifiedReport(
            type=report_type,
            rows=tuple(clean_rows),
            headers=tuple(h for h in dict.fromkeys(header_names) if h.strip()),
            source_name=source_name,
            header_row_index=0,
        )

    def _rescan(
        self,
        header_names: list[str],
        rows: list[dict[str, str]],
        source_name: str,
    ) -> ClassifiedReport:
        grid: list[list[str]] = [header_names]
        grid.extend([row.get(h, "") for h in header_names] for row in rows)
        return self.from_raw_rows(grid, source_name)
