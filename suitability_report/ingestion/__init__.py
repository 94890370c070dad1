from .cleaner import (
    clean_number,
    clean_number_expr,
    clean_percent_expr,
    rescale_percent,
    rescale_percent_expr,
    sortable_date_expr,
    to_sortable_date,
)
from .classifier import ReportType, classify, classify_source, hint_from_filename
from .header_matcher import (
    find_column,
    find_header_row,
    find_semantic_column,
    first_present_expr,
    resolve_column,
)
from .enricher import device_label_expr, normalized_category_expr
from .loader import ReportLoader, frame_from_rows

__all__ = [
    "ReportLoader",
    "ReportType",
    "classify",
    "classify_source",
    "clean_number",
    "clean_number_expr",
    "clean_percent_expr",
    "device_label_expr",
    "find_column",
    "find_header_row",
    "find_semantic_column",
    "first_present_expr",
    "frame_from_rows",
    "hint_from_filename",
    "normalized_category_expr",
    "rescale_percent",
    "rescale_percent_expr",
    "resolve_column",
    "sortable_date_expr",
    "to_sortable_date",
]
