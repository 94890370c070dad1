"""Header-row location and case-insensitive column lookup."""

import logging
from typing import Sequence

import polars as pl

from ..settings import ColumnSpec
from .classifier import ReportType, classify

logger = logging.getLogger(__name__)

DEFAULT_SCAN_LIMIT = 30
DEFAULT_DISCLAIMER_MARKERS = ("disclaimer", "免責事項", "注記")


def _normalize(header: str) -> str:
    """Lower-case and collapse internal whitespace."""
    return " ".join(str(header).split()).lower()


def _cell_text(cell: object) -> str:
    return "" if cell is None else str(cell)


def find_header_row(
    rows: Sequence[Sequence[object]],
    scan_limit: int = DEFAULT_SCAN_LIMIT,
    disclaimer_markers: Sequence[str] = DEFAULT_DISCLAIMER_MARKERS,
) -> int | None:
    """Locate the header row in a raw grid with arbitrary preamble.

    Scans at most `scan_limit` rows. Rows mentioning a disclaimer marker are
    skipped; the first remaining row whose non-empty cells classify as a
    known report type is the header.

    Returns:
        Row index, or None if no header is found within the scan bound.
    """
    markers = [m.lower() for m in disclaimer_markers]

    for index, row in enumerate(rows[:scan_limit]):
        if not row:
            continue

        cells = [_cell_text(cell) for cell in row]
        row_text = "|".join(cells).lower()
        if any(marker in row_text for marker in markers):
            continue

        candidate = [cell for cell in cells if cell != ""]
        if candidate and classify(candidate) is not ReportType.UNKNOWN:
            return index

    logger.debug("No header row found in first %d rows", scan_limit)
    return None


def find_semantic_column(
    headers: Sequence[str], keywords: Sequence[str]
) -> str | None:
    """Return the first header containing any keyword (case-insensitive)."""
    lowered = [k.lower() for k in keywords]
    for header in headers:
        name = _normalize(header)
        if any(keyword in name for keyword in lowered):
            return header
    return None


def find_column(headers: Sequence[str], names: Sequence[str]) -> str | None:
    """Return the header equal to the first matching name.

    Names are tried in order; comparison ignores case, surrounding
    whitespace and repeated inner spaces.
    """
    by_name: dict[str, str] = {}
    for header in headers:
        by_name.setdefault(_normalize(header), header)

    for name in names:
        match = by_name.get(_normalize(name))
        if match is not None:
            return match
    return None


def resolve_column(headers: Sequence[str], spec: ColumnSpec) -> str | None:
    """Exact names first, then keyword substrings."""
    return find_column(headers, spec.exact) or find_semantic_column(
        headers, spec.keywords
    )


def find_columns(headers: Sequence[str], names: Sequence[str]) -> list[str]:
    """All headers matching any of `names`, in the order of `names`."""
    found: list[str] = []
    for name in names:
        match = find_column(headers, [name])
        if match is not None and match not in found:
            found.append(match)
    return found


def first_present_expr(headers: Sequence[str], names: Sequence[str]) -> pl.Expr | None:
    """Per-row first-match-wins lookup across candidate columns.

    For each row, the value is taken from the first candidate column whose
    cell is non-blank. Returns None when no candidate column exists.
    """
    columns = find_columns(headers, names)
    if not columns:
        return None

    present = [
        pl.when(pl.col(c).cast(pl.Utf8).str.strip_chars() != "").then(pl.col(c).cast(pl.Utf8))
        for c in columns
    ]
    return pl.coalesce(present)
