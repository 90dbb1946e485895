# buckets classified questions by calendar period and computes the four
# distributions (demographic, topic, intent, journey) for every bucket
# every call recomputes from the full input; there is no incremental path

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Union

from records import QuestionContext, to_native

from .buckets import Granularity, group_by_period, sort_periods
from .demographic_aggregator import DemographicAggregator, DemographicSummary
from .history import TopicHistory
from .intent_aggregator import IntentAggregator, IntentBreakdown
from .journey_aggregator import JourneyAggregator, JourneyStageSummary
from .topic_aggregator import TopicAggregator, TopicDistribution

logger = logging.getLogger(__name__)


@dataclass
class PeriodDistribution:
    period: str
    question_count: int
    demographics: DemographicSummary
    topics: List[TopicDistribution] = field(default_factory=list)
    intents: List[IntentBreakdown] = field(default_factory=list)
    journey: List[JourneyStageSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_native(asdict(self))


class TemporalAggregator:

    def __init__(
        self,
        demographic_aggregator: DemographicAggregator = None,
        topic_aggregator: TopicAggregator = None,
        intent_aggregator: IntentAggregator = None,
        journey_aggregator: JourneyAggregator = None,
    ):
        self.demographics = demographic_aggregator or DemographicAggregator()
        self.topics = topic_aggregator or TopicAggregator()
        self.intents = intent_aggregator or IntentAggregator()
        self.journey = journey_aggregator or JourneyAggregator()

    def aggregate(
        self,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str] = Granularity.MONTHLY,
    ) -> List[PeriodDistribution]:
        """chronological list of per-bucket distributions. buckets with no
        questions are not reported."""
        granularity = Granularity(granularity)
        grouped = group_by_period(questions, granularity)

        distributions = []
        for period in sort_periods(grouped, granularity):
            bucket = grouped[period]
            distributions.append(PeriodDistribution(
                period=period,
                question_count=len(bucket),
                demographics=self.demographics.aggregate(bucket),
                topics=self.topics.aggregate(bucket),
                intents=self.intents.aggregate(bucket),
                journey=self.journey.map_questions_to_journey(bucket),
            ))

        logger.info(f"Aggregated {sum(d.question_count for d in distributions)} questions "
                    f"into {len(distributions)} {granularity.value} buckets")
        return distributions

    def build_history(
        self,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str] = Granularity.MONTHLY,
    ) -> TopicHistory:
        return TopicHistory.from_questions(questions, granularity)
