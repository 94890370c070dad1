"""Derived label columns: canonical category and device names."""

import re
from typing import Mapping, Sequence

import polars as pl

from ..settings import CategorySynonym
from .cleaner import clean_label_expr

UNKNOWN_CATEGORY = "Unknown"


def synonym_pattern(keywords: Sequence[str]) -> str:
    """Case-insensitive whole-word pattern for any of the keywords."""
    alternatives = "|".join(re.escape(k) for k in keywords)
    return rf"(?i)\b(?:{alternatives})\b"


def normalized_category_expr(
    expr: pl.Expr, synonyms: Sequence[CategorySynonym]
) -> pl.Expr:
    """Map raw category names onto the synonym table.

    Blank names become "Unknown". A name containing a synonym keyword as a
    whole word ("Pop Music", "Action Film") takes that synonym's label;
    anything else keeps its trimmed name. No fuzzy matching.
    """
    name = clean_label_expr(expr)
    result = pl.when(name == "").then(pl.lit(UNKNOWN_CATEGORY))
    for synonym in synonyms:
        if synonym.keywords:
            result = result.when(
                name.str.contains(synonym_pattern(synonym.keywords))
            ).then(pl.lit(synonym.label))
    return result.otherwise(name)


def device_label_expr(expr: pl.Expr, aliases: Mapping[str, str]) -> pl.Expr:
    """Exact-match device labels ("Ott" -> "OTT"); unrecognized -> null."""
    return clean_label_expr(expr).replace_strict(
        dict(aliases), default=None, return_dtype=pl.Utf8
    )
