"""Cell cleaning functions using Polars expressions.

Every expression here is total: malformed input becomes 0 (numbers) or is
passed through trimmed (dates). The scalar helpers evaluate the same
expressions on a single literal so there is one definition of each rule.
"""

import math
from typing import Any

import polars as pl

MISSING_TOKENS = ["", "N/A", "NA", "-"]

# Leading numeric prefix, the way a lenient float parser reads "12.5abc" as 12.5.
NUMBER_PREFIX = r"^([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"

ISO_DATE_PREFIX = r"^(\d{4})-(\d{1,2})-(\d{1,2})"
US_DATE_PREFIX = r"^(\d{1,2})/(\d{1,2})/(\d{4})"


def clean_number_expr(expr: pl.Expr) -> pl.Expr:
    """Parse a cell into a finite float.

    Handles:
    - blank, N/A, NA and "-" (any case) -> 0
    - trailing K / M unit suffix (x1,000 / x1,000,000), checked before any
      other symbol is stripped so "0.5M" -> 500000
    - currency symbols ($, ¥), percent sign, thousands separators, whitespace
    - anything unparseable or non-finite -> 0

    "0.99" stays 0.99: rescaling to a percentage is up to the caller.
    """
    text = expr.cast(pl.Utf8).fill_null("").str.strip_chars()
    upper = text.str.to_uppercase()

    multiplier = (
        pl.when(upper.str.ends_with("M"))
        .then(pl.lit(1_000_000.0))
        .when(upper.str.ends_with("K"))
        .then(pl.lit(1_000.0))
        .otherwise(pl.lit(1.0))
    )
    digits = text.str.replace(r"[kKmM]$", "").str.replace_all(r"[%,$¥\s]", "")
    number = (
        digits.str.extract(NUMBER_PREFIX, 1).cast(pl.Float64, strict=False)
        * multiplier
    )

    return (
        pl.when(upper.is_in(MISSING_TOKENS))
        .then(pl.lit(0.0))
        .when(number.is_finite())
        .then(number)
        .otherwise(pl.lit(0.0))
    )


def rescale_percent_expr(expr: pl.Expr) -> pl.Expr:
    """Bring a ratio onto the 0-100 scale.

    Values in (0, 1] are fractions and are multiplied by 100; everything
    else (already-scaled values, zero, negatives) passes through.
    """
    return pl.when((expr > 0) & (expr <= 1)).then(expr * 100).otherwise(expr)


def clean_percent_expr(expr: pl.Expr) -> pl.Expr:
    """Clean a percent-like cell and rescale it exactly once.

    The rule looks only at the cleaned number, so "0.5%" and "0.5" both
    become 50.
    """
    return rescale_percent_expr(clean_number_expr(expr))


def sortable_date_expr(expr: pl.Expr) -> pl.Expr:
    """Convert a date-like cell to a sortable YYYY-MM-DD key.

    Recognizes a leading YYYY-MM-DD (trailing time is ignored) and a leading
    MM/DD/YYYY. Anything else is returned trimmed and unchanged; blank cells
    become "".
    """
    text = expr.cast(pl.Utf8).fill_null("").str.strip_chars()

    iso_year = text.str.extract(ISO_DATE_PREFIX, 1)
    iso_month = text.str.extract(ISO_DATE_PREFIX, 2)
    iso_day = text.str.extract(ISO_DATE_PREFIX, 3)

    us_month = text.str.extract(US_DATE_PREFIX, 1)
    us_day = text.str.extract(US_DATE_PREFIX, 2)
    us_year = text.str.extract(US_DATE_PREFIX, 3)

    return (
        pl.when(iso_year.is_not_null())
        .then(
            pl.concat_str(
                [iso_year, iso_month.str.zfill(2), iso_day.str.zfill(2)],
                separator="-",
            )
        )
        .when(us_year.is_not_null())
        .then(
            pl.concat_str(
                [us_year, us_month.str.zfill(2), us_day.str.zfill(2)],
                separator="-",
            )
        )
        .otherwise(text)
    )


def clean_label_expr(expr: pl.Expr) -> pl.Expr:
    """Strip whitespace; nulls become empty strings."""
    return expr.cast(pl.Utf8).fill_null("").str.strip_chars()


def clean_number(value: Any) -> float:
    """Scalar form of clean_number_expr.

    Numbers pass through (non-finite -> 0); everything else is cleaned as
    its string form. Never raises.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return pl.select(clean_number_expr(pl.lit(str(value), dtype=pl.Utf8))).item()


def rescale_percent(value: float) -> float:
    """Scalar form of rescale_percent_expr."""
    if 0 < value <= 1:
        return value * 100
    return value


def to_sortable_date(raw: Any) -> str:
    """Scalar form of sortable_date_expr. Returns "" for blank input."""
    if raw is None:
        return ""
    return pl.select(sortable_date_expr(pl.lit(str(raw), dtype=pl.Utf8))).item()
