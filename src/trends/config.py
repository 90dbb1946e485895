# tunable thresholds for trend detection
# unset values fall back to the env-driven defaults in configs/config.py

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "configs"))
import config

from aggregation.buckets import Granularity

MAX_FORECAST_HORIZON = 24


@dataclass
class TrendAnalysisOptions:
    """thresholds for a single trend analysis run"""
    granularity: Optional[Granularity] = None

    # sample gating
    min_sample_size: Optional[int] = None
    significance_level: Optional[float] = None

    # emerging / fading topics
    baseline_periods: Optional[int] = None  # in units of current_periods
    current_periods: int = 1
    min_growth_rate: float = 0.1
    recency_windows: int = 3
    recency_weight: float = 0.5  # share of velocity that comes from newness
    max_related_topics: int = 3

    # correlation
    correlation_threshold: float = 0.5

    # seasonality (monthly history only)
    seasonal_cycles: int = 2
    seasonality_threshold: float = 0.3
    peak_threshold: float = 0.5

    # forecast
    forecast_horizon: Optional[int] = None

    def __post_init__(self):
        if self.granularity is None:
            self.granularity = config.settings.TREND_GRANULARITY
        self.granularity = Granularity(self.granularity)
        if self.min_sample_size is None:
            self.min_sample_size = config.settings.TREND_MIN_SAMPLE_SIZE
        if self.significance_level is None:
            self.significance_level = config.settings.TREND_SIGNIFICANCE_LEVEL
        if self.baseline_periods is None:
            self.baseline_periods = config.settings.TREND_BASELINE_PERIODS
        if self.forecast_horizon is None:
            self.forecast_horizon = config.settings.TREND_FORECAST_HORIZON

        if self.current_periods < 1 or self.baseline_periods < 1:
            raise ValueError("current_periods and baseline_periods must be >= 1")
        if not 0 < self.significance_level <= 1:
            raise ValueError(f"significance_level must be in (0, 1], got {self.significance_level}")
        if not 0 <= self.recency_weight <= 1:
            raise ValueError(f"recency_weight must be in [0, 1], got {self.recency_weight}")
        if not 1 <= self.forecast_horizon <= MAX_FORECAST_HORIZON:
            raise ValueError(
                f"forecast_horizon must be in [1, {MAX_FORECAST_HORIZON}], got {self.forecast_horizon}"
            )

    def to_dict(self) -> Dict[str, Any]:
        options = asdict(self)
        options["granularity"] = self.granularity.value
        return options
