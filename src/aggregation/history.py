# per-period topic counts that the trend detector works from
# rows are gap-filled chronological buckets, columns are topic ids.
# a topic counts once per question no matter how often it is mentioned.

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Tuple, Union

import numpy as np
import pandas as pd

from records import QuestionContext

from .buckets import Granularity, bucket_key, fill_periods

logger = logging.getLogger(__name__)

TopicPair = Tuple[str, str]


def pair_key(a: str, b: str) -> TopicPair:
    return (a, b) if a <= b else (b, a)


@dataclass
class TopicHistory:
    granularity: Granularity
    periods: List[str]
    counts: pd.DataFrame
    totals: pd.Series
    cooccurrence: Dict[TopicPair, pd.Series] = field(default_factory=dict)
    topic_names: Dict[str, str] = field(default_factory=dict)

    @property
    def topics(self) -> List[str]:
        return list(self.counts.columns)

    @property
    def is_empty(self) -> bool:
        return len(self.periods) == 0

    def series(self, topic_id: str) -> np.ndarray:
        if topic_id not in self.counts.columns:
            return np.zeros(len(self.periods))
        return self.counts[topic_id].to_numpy(dtype=float)

    def total_count(self, topic_id: str) -> int:
        if topic_id not in self.counts.columns:
            return 0
        return int(self.counts[topic_id].sum())

    def pair_series(self, a: str, b: str) -> np.ndarray:
        joint = self.cooccurrence.get(pair_key(a, b))
        if joint is None:
            return np.zeros(len(self.periods))
        return joint.to_numpy(dtype=float)

    def pair_total(self, a: str, b: str) -> int:
        return int(self.pair_series(a, b).sum())

    def name(self, topic_id: str) -> str:
        return self.topic_names.get(topic_id, topic_id)

    def related_topics(self, topic_id: str, limit: int) -> List[str]:
        """topics most often asked about in the same question, by joint count"""
        joint = []
        for (a, b), series in self.cooccurrence.items():
            if topic_id in (a, b):
                other = b if a == topic_id else a
                joint.append((other, int(series.sum())))
        joint.sort(key=lambda item: (-item[1], item[0]))
        return [other for other, count in joint[:limit] if count > 0]

    @classmethod
    def from_questions(
        cls,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str],
    ) -> "TopicHistory":
        granularity = Granularity(granularity)

        topic_counts: Dict[str, Counter] = defaultdict(Counter)
        pair_counts: Dict[TopicPair, Counter] = defaultdict(Counter)
        totals: Counter = Counter()
        names: Dict[str, str] = {}

        for question in questions:
            period = bucket_key(question.timestamp, granularity)
            totals[period] += 1
            topic_ids = question.topic_ids()
            for concept in question.concepts:
                names.setdefault(concept.topic_id, concept.term)
            for topic_id in topic_ids:
                topic_counts[topic_id][period] += 1
            for a, b in combinations(topic_ids, 2):
                pair_counts[pair_key(a, b)][period] += 1

        periods = fill_periods(totals, granularity)
        counts = pd.DataFrame(
            {topic_id: pd.Series(per_period, dtype=float) for topic_id, per_period in topic_counts.items()},
            index=pd.Index(periods, dtype=object),
        ).fillna(0).astype(int)

        history = cls(
            granularity=granularity,
            periods=periods,
            counts=counts,
            totals=pd.Series(totals, dtype=float).reindex(periods, fill_value=0).astype(int),
            cooccurrence={
                pair: pd.Series(per_period, dtype=float).reindex(periods, fill_value=0).astype(int)
                for pair, per_period in pair_counts.items()
            },
            topic_names=names,
        )
        logger.debug(
            f"Built {granularity.value} topic history: {len(periods)} periods, "
            f"{len(history.topics)} topics, {len(history.cooccurrence)} topic pairs"
        )
        return history
