# trends router: per-period distributions and trend analysis over a posted
# batch of classified questions. nothing is stored server side.

import logging
from fastapi import APIRouter, Depends

from aggregation.temporal_aggregator import TemporalAggregator
from api.dependencies import get_aggregator, parse_granularity
from api.models.trends import (
    DistributionsRequest,
    DistributionsResponse,
    PeriodDistributionOut,
    QuestionIn,
    TrendAnalysisRequest,
    TrendSummaryResponse,
)
from records import QuestionContext
from trends.config import TrendAnalysisOptions
from trends.detector import analyze_trends

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/trends", tags=["trends"])

# request fields that map 1:1 onto TrendAnalysisOptions
OPTION_FIELDS = [
    "min_sample_size",
    "significance_level",
    "baseline_periods",
    "forecast_horizon",
    "correlation_threshold",
]


def _to_context(question: QuestionIn) -> QuestionContext:
    return QuestionContext.from_dict(question.model_dump(by_alias=True, mode="json"))


@router.post("/distributions", response_model=DistributionsResponse)
def get_distributions(
    body: DistributionsRequest,
    aggregator: TemporalAggregator = Depends(get_aggregator),
):
    granularity = parse_granularity(body.granularity)
    questions = [_to_context(q) for q in body.questions]
    distributions = aggregator.aggregate(questions, granularity)
    return DistributionsResponse(
        granularity=granularity.value,
        periods=[PeriodDistributionOut.model_validate(d.to_dict()) for d in distributions],
    )


@router.post("/analyze", response_model=TrendSummaryResponse)
def analyze(
    body: TrendAnalysisRequest,
    aggregator: TemporalAggregator = Depends(get_aggregator),
):
    overrides = {name: getattr(body, name) for name in OPTION_FIELDS if getattr(body, name) is not None}
    if body.granularity is not None:
        overrides["granularity"] = parse_granularity(body.granularity)
    options = TrendAnalysisOptions(**overrides)

    questions = [_to_context(q) for q in body.questions]
    summary = analyze_trends(questions, options, aggregator)
    logger.info(f"Trend analysis request: {len(questions)} questions, {options.granularity.value}")
    return TrendSummaryResponse.model_validate(summary.to_dict())
