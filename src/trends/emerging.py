# emerging and fading topics
# current window = last `current_periods` buckets, baseline = the buckets right
# before it, averaged per current-window length. significance comes from a
# poisson test of the current count against the baseline rate.

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from aggregation.history import TopicHistory
from records import clamp

from .config import TrendAnalysisOptions
from .stats import growth_rate, poisson_lower_p, poisson_upper_p, recency_share

logger = logging.getLogger(__name__)


@dataclass
class TopicTrend:
    topic_id: str
    name: str
    current_frequency: float
    baseline_frequency: float
    total_frequency: int
    growth_rate: float
    percentage_change: float
    p_value: float


@dataclass
class EmergingTopic(TopicTrend):
    velocity_score: float = 0.0
    newness: float = 0.0
    related_topics: List[str] = field(default_factory=list)


def window_counts(series: np.ndarray, options: TrendAnalysisOptions) -> Optional[Tuple[float, float]]:
    """(current, baseline) counts, or None if there is no baseline bucket at all"""
    series = np.asarray(series, dtype=float)
    current_len = options.current_periods
    if len(series) <= current_len:
        return None

    current = series[-current_len:].sum()
    baseline_len = options.baseline_periods * current_len
    baseline_window = series[:-current_len][-baseline_len:]
    baseline = baseline_window.sum() / (len(baseline_window) / current_len)
    return float(current), float(baseline)


def velocity_score(growth: float, newness: float, recency_weight: float) -> float:
    """blend of bounded growth (tanh) and newness, in [0, 1]"""
    bounded_growth = np.tanh(max(growth, 0.0))
    return clamp((1 - recency_weight) * bounded_growth + recency_weight * newness)


def topic_trend(history: TopicHistory, topic_id: str, options: TrendAnalysisOptions) -> Optional[EmergingTopic]:
    """window statistics for one topic. None when the topic is below the
    minimum sample size or the history is too short to have a baseline."""
    total = history.total_count(topic_id)
    if total < options.min_sample_size:
        return None

    series = history.series(topic_id)
    windows = window_counts(series, options)
    if windows is None:
        return None
    current, baseline = windows

    growth = growth_rate(current, baseline)
    newness = recency_share(series, options.recency_windows)
    p_value = poisson_upper_p(current, baseline) if growth >= 0 else poisson_lower_p(current, baseline)

    return EmergingTopic(
        topic_id=topic_id,
        name=history.name(topic_id),
        current_frequency=current,
        baseline_frequency=baseline,
        total_frequency=total,
        growth_rate=growth,
        percentage_change=growth * 100,
        p_value=p_value,
        velocity_score=velocity_score(growth, newness, options.recency_weight),
        newness=newness,
        related_topics=history.related_topics(topic_id, options.max_related_topics),
    )


def detect_emerging_topics(history: TopicHistory, options: TrendAnalysisOptions) -> List[EmergingTopic]:
    emerging = []
    for topic_id in history.topics:
        trend = topic_trend(history, topic_id, options)
        if trend is None:
            continue
        if trend.growth_rate > options.min_growth_rate and trend.p_value < options.significance_level:
            emerging.append(trend)

    emerging.sort(key=lambda t: (-t.velocity_score, -t.growth_rate, t.topic_id))
    logger.info(f"Emerging topics: {len(emerging)} of {len(history.topics)} topics")
    return emerging


def detect_fading_topics(history: TopicHistory, options: TrendAnalysisOptions) -> List[TopicTrend]:
    fading = []
    for topic_id in history.topics:
        trend = topic_trend(history, topic_id, options)
        if trend is None:
            continue
        if trend.growth_rate < -options.min_growth_rate and trend.p_value < options.significance_level:
            fading.append(TopicTrend(
                topic_id=trend.topic_id,
                name=trend.name,
                current_frequency=trend.current_frequency,
                baseline_frequency=trend.baseline_frequency,
                total_frequency=trend.total_frequency,
                growth_rate=trend.growth_rate,
                percentage_change=trend.percentage_change,
                p_value=trend.p_value,
            ))

    fading.sort(key=lambda t: (t.percentage_change, t.topic_id))
    logger.info(f"Fading topics: {len(fading)} of {len(history.topics)} topics")
    return fading
