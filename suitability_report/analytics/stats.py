"""Statistical helpers using scipy."""

from typing import Sequence

import numpy as np
from scipy import stats

from .models import TrendDirection


def detect_trend(
    values: Sequence[float] | np.ndarray,
    p_threshold: float = 0.05,
    r_threshold: float = 0.3,
) -> TrendDirection:
    """Detect trend direction using linear regression.

    Args:
        values: Ordered metric values (e.g., daily suitability %)
        p_threshold: P-value threshold for significance
        r_threshold: Minimum R-value for meaningful trend

    Returns:
        Trend direction based on slope significance.
    """
    if len(values) < 3:
        return "stable"

    arr = np.asarray(values, dtype=float)
    if not np.all(np.isfinite(arr)) or np.ptp(arr) == 0:
        return "stable"

    x = np.arange(len(arr))
    slope, _, r_value, p_value, _ = stats.linregress(x, arr)

    if p_value < p_threshold and abs(r_value) > r_threshold:
        return "increasing" if slope > 0 else "decreasing"
    return "stable"
