"""Reusable Polars expressions for aggregation."""

import polars as pl


# =============================================================================
# WEIGHTED AVERAGES
# =============================================================================


def weighted_average_expr(metric: str, weight: str) -> pl.Expr:
    """sum(metric * weight) / sum(weight).

    Falls back to the plain mean when the weights sum to 0, so a rate
    reported without volume is still shown.
    """
    return (
        pl.when(pl.col(weight).sum() > 0)
        .then((pl.col(metric) * pl.col(weight)).sum() / pl.col(weight).sum())
        .otherwise(pl.col(metric).mean().fill_null(0.0))
    )


def weighted_average_or_null_expr(metric: str, weight: str) -> pl.Expr:
    """sum(metric * weight) / sum(weight), or null when the weights sum to 0.

    For chart cells where a missing denominator must show as a gap.
    """
    return (
        pl.when(pl.col(weight).sum() > 0)
        .then((pl.col(metric) * pl.col(weight)).sum() / pl.col(weight).sum())
        .otherwise(pl.lit(None, dtype=pl.Float64))
    )


# =============================================================================
# RATIOS
# =============================================================================


def ratio_pct_expr(numerator: str, denominator: str) -> pl.Expr:
    """100 * sum(numerator) / sum(denominator), or 0 for an empty denominator.

    Sums first, divides once, so per-row rates are never averaged.
    """
    return (
        pl.when(pl.col(denominator).sum() > 0)
        .then(pl.col(numerator).sum() / pl.col(denominator).sum() * 100)
        .otherwise(pl.lit(0.0))
    )


# =============================================================================
# FILTERS
# =============================================================================


def label_equals_expr(column: str, value: str) -> pl.Expr:
    """Case-insensitive, trimmed equality on a text column."""
    return (
        pl.col(column).cast(pl.Utf8).fill_null("").str.strip_chars().str.to_lowercase()
        == value.lower()
    )


# =============================================================================
# SUMS
# =============================================================================


def sum_or_null_expr(column: str) -> pl.Expr:
    """Sum of the column, or null when every value is null."""
    return (
        pl.when(pl.col(column).is_not_null().any())
        .then(pl.col(column).sum())
        .otherwise(pl.lit(None, dtype=pl.Float64))
    )
