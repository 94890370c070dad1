"""Report type detection from header content."""

import logging
from typing import Mapping, Sequence

from ..models.report import ReportType

logger = logging.getLogger(__name__)


# Evaluated in order; first match wins. Each rule is a list of groups, every
# group must have at least one substring present in the joined headers.
CLASSIFICATION_RULES: list[tuple[ReportType, list[tuple[str, ...]]]] = [
    (ReportType.PERFORMANCE, [("category name",), ("vcr", "vcr%")]),
    (
        ReportType.SUITABILITY,
        [("brand suitability", "suitability%"), ("suitable impressions",)],
    ),
    (
        ReportType.VIEWABILITY,
        [("viewability rate", "viewability%"), ("gross impressions",)],
    ),
    (ReportType.EXCLUSION, [("video suitability",), ("placement name",)]),
]

# Single-substring signals, only strong enough to confirm a filename hint.
WEAK_HEADER_SIGNALS: list[tuple[ReportType, str]] = [
    (ReportType.VIEWABILITY, "device"),
    (ReportType.SUITABILITY, "suitable impressions"),
    (ReportType.PERFORMANCE, "category name"),
    (ReportType.EXCLUSION, "video suitability"),
]


def _joined(headers: Sequence[object]) -> str:
    return "|".join(str(h).lower() for h in headers if h is not None)


def classify(headers: Sequence[object]) -> ReportType:
    """Classify a header set. Pure function of the headers."""
    joined = _joined(headers)
    for report_type, groups in CLASSIFICATION_RULES:
        if all(any(s in joined for s in group) for group in groups):
            return report_type
    return ReportType.UNKNOWN


def weak_header_signal(headers: Sequence[object]) -> ReportType:
    """Single-keyword guess used only to corroborate a filename hint."""
    joined = _joined(headers)
    for report_type, substring in WEAK_HEADER_SIGNALS:
        if substring in joined:
            return report_type
    return ReportType.UNKNOWN


def hint_from_filename(
    source_name: str, filename_hints: Mapping[str, Sequence[str]]
) -> ReportType:
    """Guess a report type from a file name.

    Hints are checked in mapping order, e.g. "view" before "suit".
    """
    name = (source_name or "").lower()
    for type_value, keywords in filename_hints.items():
        if any(keyword.lower() in name for keyword in keywords):
            return ReportType(type_value)
    return ReportType.UNKNOWN


def classify_source(
    headers: Sequence[object],
    source_name: str,
    filename_hints: Mapping[str, Sequence[str]],
) -> ReportType:
    """Classify with header content first and the file name as tie-breaker.

    The filename hint is used only when the header table gives Unknown and
    either there are no headers at all, or a weak header signal agrees with
    the hint. A successful header classification is never overridden.
    """
    report_type = classify(headers)
    if report_type is not ReportType.UNKNOWN:
        return report_type

    hint = hint_from_filename(source_name, filename_hints)
    if hint is ReportType.UNKNOWN:
        return ReportType.UNKNOWN

    non_empty = [h for h in headers if h is not None and str(h).strip()]
    if not non_empty:
        logger.info("Classified %s as %s from file name only", source_name, hint.value)
        return hint

    if weak_header_signal(non_empty) is hint:
        logger.info(
            "Classified %s as %s from file name and partial headers",
            source_name,
            hint.value,
        )
        return hint

    return ReportType.UNKNOWN
