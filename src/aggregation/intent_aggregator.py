from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Union

from records import ClinicalIntent, QuestionContext

from .buckets import Granularity, group_by_period, sort_periods

TOP_CONCEPTS = 5


@dataclass
class IntentBreakdown:
    intent: ClinicalIntent
    count: int = 0
    percentage: float = 0.0
    common_concepts: List[str] = field(default_factory=list)


class IntentAggregator:

    def aggregate(self, questions: Iterable[QuestionContext]) -> List[IntentBreakdown]:
        """one breakdown per intent seen, in first-seen order.
        questions without an intent are left out of the denominator"""
        intent_counts: Counter = Counter()
        intent_terms: Dict[ClinicalIntent, Counter] = {}

        for question in questions:
            intent = question.clinical_intent
            if intent is None:
                continue
            intent_counts[intent] += 1
            terms = intent_terms.setdefault(intent, Counter())
            terms.update(concept.term for concept in question.concepts)

        total = sum(intent_counts.values())
        return [
            IntentBreakdown(
                intent=intent,
                count=count,
                percentage=count / total * 100,
                common_concepts=[term for term, _ in intent_terms[intent].most_common(TOP_CONCEPTS)],
            )
            for intent, count in intent_counts.items()
        ]

    def get_intent_trends(
        self,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str] = Granularity.WEEKLY,
    ) -> List[Dict]:
        grouped = group_by_period(questions, granularity)
        return [
            {"period": period, "breakdown": self.aggregate(grouped[period])}
            for period in sort_periods(grouped, granularity)
        ]
