# groups medical concepts into a fixed specialty hierarchy
# a term can land in several categories at once

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from records import MedicalConcept, QuestionContext

TOPIC_HIERARCHY: Dict[str, List[str]] = {
    "cardiovascular": ["heart disease", "hypertension", "arrhythmia"],
    "respiratory": ["asthma", "copd", "pneumonia"],
    "endocrine": ["diabetes", "thyroid", "hormonal"],
    "neurological": ["seizure", "stroke", "headache"],
    "infectious": ["bacterial", "viral", "fungal"],
}


@dataclass
class TopicDistribution:
    category: str
    count: int = 0
    percentage: float = 0.0
    sub_topics: List[Dict] = field(default_factory=list)


class TopicAggregator:

    def __init__(self, hierarchy: Dict[str, List[str]] = None):
        self.hierarchy = hierarchy or TOPIC_HIERARCHY

    def categories_for(self, term: str) -> List[str]:
        lowered = term.lower()
        return [
            category
            for category, keywords in self.hierarchy.items()
            if any(keyword.lower() in lowered for keyword in keywords)
        ]

    def aggregate_topics(self, concepts: Iterable[MedicalConcept]) -> List[TopicDistribution]:
        """percentage = distinct terms in category / all concepts seen"""
        concepts = list(concepts)
        term_counts: Dict[str, int] = {}
        for concept in concepts:
            term_counts[concept.term] = term_counts.get(concept.term, 0) + 1

        category_terms: Dict[str, List[str]] = {category: [] for category in self.hierarchy}
        for term in term_counts:
            for category in self.categories_for(term):
                category_terms[category].append(term)

        total = len(concepts)
        return [
            TopicDistribution(
                category=category,
                count=len(terms),
                percentage=len(terms) / total * 100 if total else 0.0,
                sub_topics=[{"term": term, "count": term_counts[term]} for term in terms],
            )
            for category, terms in category_terms.items()
        ]

    def aggregate(self, questions: Iterable[QuestionContext]) -> List[TopicDistribution]:
        concepts = [concept for question in questions for concept in question.concepts]
        return self.aggregate_topics(concepts)
