# small statistics helpers shared by the trend analyses
# everything returns plain floats, clamped where a probability is expected

from typing import Optional, Tuple

import numpy as np
from scipy import stats

from records import clamp

MIN_CORRELATION_POINTS = 3


def growth_rate(current: float, baseline: float) -> float:
    """relative change; a zero baseline is treated as 1 so the result stays finite"""
    return (current - baseline) / max(baseline, 1.0)


def recency_share(values: np.ndarray, windows: int) -> float:
    """fraction of all occurrences that fall in the last of `windows` equal sub-windows"""
    values = np.asarray(values, dtype=float)
    total = values.sum()
    if len(values) == 0 or total <= 0:
        return 0.0
    chunks = np.array_split(values, min(windows, len(values)))
    return clamp(chunks[-1].sum() / total)


def poisson_upper_p(observed: float, expected: float) -> float:
    """P(X >= observed) for X ~ Poisson(max(expected, 1))"""
    rate = max(expected, 1.0)
    return clamp(stats.poisson.sf(np.ceil(observed) - 1, rate))


def poisson_lower_p(observed: float, expected: float) -> float:
    """P(X <= observed) for X ~ Poisson(max(expected, 1))"""
    rate = max(expected, 1.0)
    return clamp(stats.poisson.cdf(np.floor(observed), rate))


def pearson(x: np.ndarray, y: np.ndarray) -> Optional[Tuple[float, float]]:
    """pearson r and two-tailed p from the t statistic with n-2 degrees of freedom.
    None when there are fewer than 3 points or either series is constant."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    if n < MIN_CORRELATION_POINTS or len(y) != n:
        return None
    if np.std(x) == 0 or np.std(y) == 0:
        return None

    r = clamp(float(np.corrcoef(x, y)[0, 1]), -1.0, 1.0)
    if abs(r) >= 1.0:
        return r, 0.0

    t_stat = r * np.sqrt((n - 2) / (1 - r ** 2))
    p_value = 2 * stats.t.sf(abs(t_stat), n - 2)
    return r, clamp(p_value)
