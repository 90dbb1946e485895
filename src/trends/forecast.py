# short-horizon topic forecasts
# linear least squares on the per-bucket counts, or a log-linear fit when the
# series is accelerating. the interval is the 95% regression prediction
# interval, so it widens with a weaker fit and with fewer buckets.

import calendar
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy import stats

from aggregation.buckets import Granularity, key_for_period, period_start
from aggregation.history import TopicHistory
from records import clamp

from .config import TrendAnalysisOptions
from .correlation import TopicCorrelation
from .seasonality import SeasonalPattern

logger = logging.getLogger(__name__)

MIN_FORECAST_POINTS = 3
MIN_ACCELERATION_POINTS = 4
PREDICTION_LEVEL = 0.95
ACCELERATION_FACTOR = 2.0


@dataclass
class TrendForecast:
    topic_id: str
    name: str
    forecast_period: str
    model: str
    current_frequency: float
    projected_frequency: float
    growth_projection: float
    confidence_interval: Tuple[float, float]
    fit_r_squared: float
    growth_drivers: List[str] = field(default_factory=list)
    seasonal_adjusted: bool = False


def is_accelerating(values: np.ndarray) -> bool:
    """strictly positive series whose recent half slope is more than twice the early half slope"""
    if len(values) < MIN_ACCELERATION_POINTS or np.any(values <= 0):
        return False
    half = len(values) // 2
    early = stats.linregress(np.arange(half), values[:half]).slope
    recent = stats.linregress(np.arange(len(values) - half), values[half:]).slope
    return recent > 0 and recent > ACCELERATION_FACTOR * max(early, 0.0)


def fit_projection(values: np.ndarray, horizon: int, exponential: bool) -> Tuple[float, float, float, float]:
    """(projected, low, high, r_squared) at `horizon` buckets past the last one"""
    n = len(values)
    x = np.arange(n, dtype=float)
    y = np.log(values) if exponential else values

    fit = stats.linregress(x, y)
    x_target = n - 1 + horizon
    predicted = fit.intercept + fit.slope * x_target

    fitted = fit.intercept + fit.slope * x
    dof = n - 2
    residual_std = np.sqrt(np.sum((y - fitted) ** 2) / dof)
    sxx = np.sum((x - x.mean()) ** 2)
    t_crit = stats.t.ppf((1 + PREDICTION_LEVEL) / 2, dof)
    half_width = t_crit * residual_std * np.sqrt(1 + 1 / n + (x_target - x.mean()) ** 2 / sxx)

    low, high = predicted - half_width, predicted + half_width
    if exponential:
        with np.errstate(over="ignore"):
            predicted, low, high = np.exp(predicted), np.exp(low), np.exp(high)

    r_squared = clamp(fit.rvalue ** 2) if np.isfinite(fit.rvalue) else 0.0
    return float(predicted), float(low), float(high), r_squared


def growth_drivers(topic_id: str, correlations: List[TopicCorrelation], threshold: float) -> List[str]:
    """strongly correlated topics whose correlation is rising"""
    drivers = []
    for corr in correlations:
        if topic_id not in (corr.source_id, corr.target_id):
            continue
        if abs(corr.correlation_coefficient) < threshold:
            continue
        baseline = corr.baseline_coefficient
        if baseline is None or corr.recent_coefficient > baseline:
            drivers.append(corr.target_id if corr.source_id == topic_id else corr.source_id)
    return drivers


def forecast_topic(
    history: TopicHistory,
    topic_id: str,
    options: TrendAnalysisOptions,
    correlations: Optional[List[TopicCorrelation]] = None,
    seasonal: Optional[SeasonalPattern] = None,
) -> Optional[TrendForecast]:
    values = history.series(topic_id)
    if len(values) < MIN_FORECAST_POINTS or history.total_count(topic_id) < options.min_sample_size:
        return None

    horizon = options.forecast_horizon
    exponential = is_accelerating(values)
    projected, low, high, r_squared = fit_projection(values, horizon, exponential)
    if not np.all(np.isfinite([projected, low, high])):
        logger.debug(f"Skipping forecast for {topic_id}: projection overflowed at horizon {horizon}")
        return None

    target = period_start(history.periods[-1], history.granularity) + horizon
    seasonal_adjusted = False
    if (
        history.granularity == Granularity.MONTHLY
        and seasonal is not None
        and seasonal.seasonality_strength >= options.seasonality_threshold
    ):
        index = seasonal.seasonal_indices.get(calendar.month_name[target.month])
        if index is not None:
            projected, low, high = projected + index, low + index, high + index
            seasonal_adjusted = True

    projected, low, high = max(projected, 0.0), max(low, 0.0), max(high, 0.0)
    current = float(values[-1])
    scale = max(current, 1.0)

    return TrendForecast(
        topic_id=topic_id,
        name=history.name(topic_id),
        forecast_period=key_for_period(target, history.granularity),
        model="exponential" if exponential else "linear",
        current_frequency=current,
        projected_frequency=projected,
        growth_projection=(projected - current) / scale * 100,
        confidence_interval=((low - current) / scale * 100, (high - current) / scale * 100),
        fit_r_squared=r_squared,
        growth_drivers=growth_drivers(topic_id, correlations or [], options.correlation_threshold),
        seasonal_adjusted=seasonal_adjusted,
    )


def detect_forecasts(
    history: TopicHistory,
    options: TrendAnalysisOptions,
    correlations: Optional[List[TopicCorrelation]] = None,
    seasonal_patterns: Optional[List[SeasonalPattern]] = None,
) -> List[TrendForecast]:
    seasonal_by_topic: Dict[str, SeasonalPattern] = {p.topic_id: p for p in seasonal_patterns or []}

    forecasts = []
    for topic_id in history.topics:
        forecast = forecast_topic(history, topic_id, options, correlations, seasonal_by_topic.get(topic_id))
        if forecast is not None:
            forecasts.append(forecast)

    forecasts.sort(key=lambda f: (-f.growth_projection, f.topic_id))
    logger.info(f"Forecasts: {len(forecasts)} topics, horizon {options.forecast_horizon} {history.granularity.value} periods")
    return forecasts
