# runs the four trend analyses over a topic history and bundles the results
# sparse data gives empty result lists, never an exception

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from aggregation.buckets import Granularity
from aggregation.history import TopicHistory
from aggregation.temporal_aggregator import TemporalAggregator
from records import QuestionContext, to_native

from .config import TrendAnalysisOptions
from .correlation import TopicCorrelation, detect_correlations
from .emerging import EmergingTopic, TopicTrend, detect_emerging_topics, detect_fading_topics
from .forecast import TrendForecast, detect_forecasts
from .seasonality import SeasonalPattern, detect_seasonal_patterns

logger = logging.getLogger(__name__)


@dataclass
class TrendSummary:
    granularity: Granularity
    emerging_topics: List[EmergingTopic] = field(default_factory=list)
    fading_topics: List[TopicTrend] = field(default_factory=list)
    correlations: List[TopicCorrelation] = field(default_factory=list)
    seasonal_patterns: List[SeasonalPattern] = field(default_factory=list)
    forecasts: List[TrendForecast] = field(default_factory=list)
    analysis_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data_timeframe: Optional[Dict[str, Any]] = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.emerging_topics or self.fading_topics or self.correlations
            or self.seasonal_patterns or self.forecasts
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_native(asdict(self))


class TrendDetector:

    def __init__(self, options: Optional[TrendAnalysisOptions] = None):
        self.options = options or TrendAnalysisOptions()

    def analyze(self, history: TopicHistory, seasonal_history: Optional[TopicHistory] = None) -> TrendSummary:
        """seasonality runs on `history` when it is monthly, otherwise on
        `seasonal_history` (a monthly history of the same questions) if given"""
        if history.is_empty:
            logger.info("No questions in history, returning empty trend summary")
            return TrendSummary(granularity=history.granularity)

        options = self.options
        monthly = history if history.granularity == Granularity.MONTHLY else seasonal_history

        emerging = detect_emerging_topics(history, options)
        fading = detect_fading_topics(history, options)
        correlations = detect_correlations(history, options)
        seasonal = detect_seasonal_patterns(monthly, options)
        forecasts = detect_forecasts(
            history,
            options,
            correlations=correlations,
            seasonal_patterns=seasonal if monthly is history else None,
        )

        return TrendSummary(
            granularity=history.granularity,
            emerging_topics=emerging,
            fading_topics=fading,
            correlations=correlations,
            seasonal_patterns=seasonal,
            forecasts=forecasts,
            data_timeframe={
                "start": history.periods[0],
                "end": history.periods[-1],
                "periods": len(history.periods),
                "questions": int(history.totals.sum()),
            },
        )


def analyze_trends(
    questions: Iterable[QuestionContext],
    options: Optional[TrendAnalysisOptions] = None,
    aggregator: Optional[TemporalAggregator] = None,
) -> TrendSummary:
    """bucket the questions and run every trend analysis on them"""
    questions = list(questions)
    options = options or TrendAnalysisOptions()
    aggregator = aggregator or TemporalAggregator()

    history = aggregator.build_history(questions, options.granularity)
    seasonal_history = None
    if options.granularity != Granularity.MONTHLY and questions:
        seasonal_history = aggregator.build_history(questions, Granularity.MONTHLY)

    summary = TrendDetector(options).analyze(history, seasonal_history)
    logger.info(
        f"Trend analysis over {len(questions)} questions: "
        f"{len(summary.emerging_topics)} emerging, {len(summary.fading_topics)} fading, "
        f"{len(summary.correlations)} correlations, {len(summary.seasonal_patterns)} seasonal, "
        f"{len(summary.forecasts)} forecasts"
    )
    return summary
