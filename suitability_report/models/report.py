"""Input-side models: raw rows and classified reports."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

# One tokenized data row: source column name (case preserved) -> cell text.
RawRow = Mapping[str, str]


class ReportType(str, Enum):
    """Kinds of export the pipeline understands."""

    PERFORMANCE = "performance"
    SUITABILITY = "suitability"
    VIEWABILITY = "viewability"
    EXCLUSION = "exclusion"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedReport:
    """One uploaded file after header location and classification.

    Created once per file for the duration of an upload session. An
    unclassifiable file is still a ClassifiedReport, of type UNKNOWN with
    no rows.
    """

    type: ReportType
    rows: tuple[RawRow, ...]
    headers: tuple[str, ...]
    source_name: str
    header_row_index: int | None = field(default=None, compare=False)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_recognized(self) -> bool:
        return self.type is not ReportType.UNKNOWN

    @classmethod
    def unknown(cls, source_name: str) -> "ClassifiedReport":
        """Placeholder for a file no header rule recognized."""
        return cls(type=ReportType.UNKNOWN, rows=(), headers=(), source_name=source_name)
