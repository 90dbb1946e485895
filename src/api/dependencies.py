# fastapi dependency injection
# services hold only immutable configuration, so one instance per process is enough

from functools import lru_cache

from fastapi import HTTPException, status

from aggregation.buckets import Granularity
from aggregation.temporal_aggregator import TemporalAggregator
from classification.intent_classifier import IntentClassifier


@lru_cache
def get_classifier() -> IntentClassifier:
    """compiled rule table is loaded on first use"""
    return IntentClassifier()


@lru_cache
def get_aggregator() -> TemporalAggregator:
    return TemporalAggregator()


def parse_granularity(value: str) -> Granularity:
    try:
        return Granularity(value)
    except ValueError:
        allowed = ", ".join(g.value for g in Granularity)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown granularity '{value}'. Expected one of: {allowed}",
        )
