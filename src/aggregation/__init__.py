from .buckets import Granularity, bucket_key, fill_periods, group_by_period, sort_periods
from .history import TopicHistory
from .temporal_aggregator import PeriodDistribution, TemporalAggregator

__all__ = [
    "Granularity",
    "bucket_key",
    "fill_periods",
    "group_by_period",
    "sort_periods",
    "TopicHistory",
    "PeriodDistribution",
    "TemporalAggregator",
]
