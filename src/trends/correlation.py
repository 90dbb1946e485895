# pairwise topic correlation over aligned per-bucket counts
# only pairs asked about together at least min_sample_size times are tested

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from aggregation.history import TopicHistory

from .config import TrendAnalysisOptions
from .stats import MIN_CORRELATION_POINTS, pearson

logger = logging.getLogger(__name__)


@dataclass
class TopicCorrelation:
    source_id: str
    target_id: str
    source_name: str
    target_name: str
    correlation_coefficient: float
    p_value: float
    cooccurrence_frequency: float
    is_novel: bool
    recent_coefficient: float
    baseline_coefficient: Optional[float]
    sample_size: int


def correlate_pair(
    history: TopicHistory, a: str, b: str, options: TrendAnalysisOptions
) -> Optional[TopicCorrelation]:
    x = history.series(a)
    y = history.series(b)
    overall = pearson(x, y)
    if overall is None:
        return None
    r, p_value = overall

    joint = history.pair_series(a, b)
    n = len(history.periods)
    cooccurrence_frequency = float(np.count_nonzero(joint)) / n if n else 0.0

    # recent half vs baseline half
    split = n // 2
    recent = pearson(x[split:], y[split:])
    recent_r = recent[0] if recent is not None else r
    baseline = pearson(x[:split], y[:split])
    baseline_r = baseline[0] if baseline is not None else None

    absent_before = not joint[:split].any()
    if min(split, n - split) < MIN_CORRELATION_POINTS:
        # halves too short for their own coefficient, only joint occurrence says anything
        is_novel = absent_before
    else:
        strong_recently = abs(recent_r) >= options.correlation_threshold
        weak_before = baseline_r is None or abs(baseline_r) < options.correlation_threshold
        is_novel = strong_recently and (absent_before or weak_before)

    return TopicCorrelation(
        source_id=a,
        target_id=b,
        source_name=history.name(a),
        target_name=history.name(b),
        correlation_coefficient=r,
        p_value=p_value,
        cooccurrence_frequency=cooccurrence_frequency,
        is_novel=bool(is_novel),
        recent_coefficient=recent_r,
        baseline_coefficient=baseline_r,
        sample_size=n,
    )


def detect_correlations(history: TopicHistory, options: TrendAnalysisOptions) -> List[TopicCorrelation]:
    correlations = []
    for (a, b) in history.cooccurrence:
        if history.pair_total(a, b) < options.min_sample_size:
            continue
        result = correlate_pair(history, a, b, options)
        if result is None:
            logger.debug(f"Skipping pair {a}/{b}: too few buckets or constant series")
            continue
        if (
            abs(result.correlation_coefficient) >= options.correlation_threshold
            and result.p_value < options.significance_level
        ):
            correlations.append(result)

    correlations.sort(key=lambda c: (-abs(c.correlation_coefficient), c.source_id, c.target_id))
    logger.info(f"Significant topic correlations: {len(correlations)}")
    return correlations
