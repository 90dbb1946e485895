# monthly seasonal cycles per topic
# the series is linearly detrended, the cyclical component is the mean
# residual per calendar month, and strength is the share of residual
# variance that component explains.

import calendar
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from aggregation.buckets import Granularity, period_start
from aggregation.history import TopicHistory
from records import clamp

from .config import TrendAnalysisOptions

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass
class PredictedChange:
    direction: str  # "up" / "down"
    timeframe: int  # months until the next turning point
    confidence: float


@dataclass
class SeasonalPattern:
    topic_id: str
    name: str
    seasonality_strength: float
    peak_periods: List[str] = field(default_factory=list)
    trough_periods: List[str] = field(default_factory=list)
    current_position: str = "rising"
    next_predicted_change: Optional[PredictedChange] = None
    seasonal_indices: Dict[str, float] = field(default_factory=dict)
    seasonality_type: str = "annual"  # twelve month cycle


def detrend(values: np.ndarray) -> np.ndarray:
    x = np.arange(len(values), dtype=float)
    slope, intercept = np.polyfit(x, values, 1)
    return values - (slope * x + intercept)


def seasonal_indices(residual: np.ndarray, months: np.ndarray) -> Dict[int, float]:
    """mean detrended residual per calendar month (1..12)"""
    return {
        month: float(residual[months == month].mean())
        for month in range(1, MONTHS_PER_YEAR + 1)
        if (months == month).any()
    }


def seasonality_strength(residual: np.ndarray, months: np.ndarray, indices: Dict[int, float]) -> float:
    """var(cyclical) / var(residual), in [0, 1]; a flat series has strength 0"""
    residual_var = float(np.var(residual))
    if residual_var < 1e-12:
        return 0.0
    cyclical = np.array([indices[m] for m in months])
    return clamp(float(np.var(cyclical)) / residual_var)


def _position(indices: Dict[int, float], month: int) -> str:
    prev_month = (month - 2) % MONTHS_PER_YEAR + 1
    next_month = month % MONTHS_PER_YEAR + 1
    current = indices[month]
    previous = indices.get(prev_month, current)
    upcoming = indices.get(next_month, current)

    if current >= previous and current > upcoming:
        return "peak"
    if current <= previous and current < upcoming:
        return "trough"
    return "rising" if upcoming - previous >= 0 else "falling"


def _next_change(indices: Dict[int, float], month: int, strength: float) -> PredictedChange:
    """direction of the next month-on-month move and how long it lasts"""
    def step(m: int) -> float:
        following = m % MONTHS_PER_YEAR + 1
        return indices.get(following, indices[m]) - indices[m]

    direction = "up" if step(month) > 0 else "down"
    timeframe = 1
    cursor = month % MONTHS_PER_YEAR + 1
    while timeframe < MONTHS_PER_YEAR:
        move = step(cursor)
        if (move > 0) != (direction == "up"):
            break
        timeframe += 1
        cursor = cursor % MONTHS_PER_YEAR + 1
    return PredictedChange(direction=direction, timeframe=timeframe, confidence=strength)


def detect_topic_seasonality(
    history: TopicHistory, topic_id: str, options: TrendAnalysisOptions
) -> SeasonalPattern:
    values = history.series(topic_id)
    months = np.array([period_start(p, Granularity.MONTHLY).month for p in history.periods])

    residual = detrend(values)
    indices = seasonal_indices(residual, months)
    strength = seasonality_strength(residual, months, indices)

    # a flat series has no peaks or troughs, only float noise
    spread = max(abs(v) for v in indices.values()) if strength > 0 else 0.0
    normalized = {m: (v / spread if spread > 0 else 0.0) for m, v in indices.items()}
    peaks = [calendar.month_name[m] for m, v in normalized.items() if v > options.peak_threshold]
    troughs = [calendar.month_name[m] for m, v in normalized.items() if v < -options.peak_threshold]

    latest_month = int(months[-1])
    next_change = None
    if strength >= options.seasonality_threshold:
        next_change = _next_change(indices, latest_month, strength)

    return SeasonalPattern(
        topic_id=topic_id,
        name=history.name(topic_id),
        seasonality_strength=strength,
        peak_periods=peaks,
        trough_periods=troughs,
        current_position=_position(indices, latest_month),
        next_predicted_change=next_change,
        seasonal_indices={calendar.month_name[m]: v for m, v in indices.items()},
    )


def detect_seasonal_patterns(history: Optional[TopicHistory], options: TrendAnalysisOptions) -> List[SeasonalPattern]:
    if history is None or history.granularity != Granularity.MONTHLY:
        return []
    required = MONTHS_PER_YEAR * options.seasonal_cycles
    if len(history.periods) < required:
        logger.info(f"Seasonality skipped: {len(history.periods)} months of history, need {required}")
        return []

    patterns = []
    for topic_id in history.topics:
        if history.total_count(topic_id) < options.min_sample_size:
            continue
        patterns.append(detect_topic_seasonality(history, topic_id, options))

    patterns.sort(key=lambda p: (-p.seasonality_strength, p.topic_id))
    return patterns
