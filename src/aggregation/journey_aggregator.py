# maps questions onto treatment-journey stages
# stage = first stage whose keywords appear in the question's concept terms.
# stage timing is measured in days from the earliest diagnosis-stage question
# about the same disease. stages without any anchored question report a timing
# of 0 with timing_samples = 0 so callers can tell "no data" from "same day".

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from records import ConceptCategory, QuestionContext

from .buckets import Granularity, group_by_period, sort_periods

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
TOP_CONCEPTS = 5


class JourneyStage(str, Enum):
    INITIAL_SYMPTOMS = "initial_symptoms"
    DIAGNOSIS = "diagnosis"
    TREATMENT_PLANNING = "treatment_planning"
    ACTIVE_TREATMENT = "active_treatment"
    MONITORING = "monitoring"
    FOLLOW_UP = "follow_up"
    LONG_TERM_MANAGEMENT = "long_term_management"


DEFAULT_STAGE = JourneyStage.TREATMENT_PLANNING

STAGE_KEYWORDS: Dict[JourneyStage, List[str]] = {
    JourneyStage.INITIAL_SYMPTOMS: [
        "first noticed", "started experiencing", "new symptoms", "onset", "presenting symptoms",
    ],
    JourneyStage.DIAGNOSIS: [
        "diagnose", "test results", "confirm diagnosis", "differential diagnosis", "diagnostic criteria",
    ],
    JourneyStage.TREATMENT_PLANNING: [
        "treatment options", "plan", "approach", "therapy choice", "treatment strategy",
    ],
    JourneyStage.ACTIVE_TREATMENT: [
        "current treatment", "therapy", "medication", "side effects", "response to treatment",
    ],
    JourneyStage.MONITORING: [
        "monitoring", "progress", "tracking", "response assessment", "evaluation",
    ],
    JourneyStage.FOLLOW_UP: [
        "follow-up", "check-up", "post-treatment", "recovery", "rehabilitation",
    ],
    JourneyStage.LONG_TERM_MANAGEMENT: [
        "long-term", "chronic", "ongoing management", "maintenance", "prevention",
    ],
}


@dataclass
class JourneyStageSummary:
    stage: JourneyStage
    question_count: int = 0
    common_concepts: List[str] = field(default_factory=list)
    average_timing: float = 0.0
    timing_samples: int = 0


def determine_stage(question: QuestionContext) -> JourneyStage:
    text = " ".join(concept.term for concept in question.concepts).lower()
    for stage, keywords in STAGE_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return stage
    return DEFAULT_STAGE


def disease_key(question: QuestionContext) -> Optional[str]:
    """term of the highest-confidence disease concept (first wins on ties)"""
    diseases = [c for c in question.concepts if c.category == ConceptCategory.DISEASE]
    if not diseases:
        return None
    return max(diseases, key=lambda c: c.confidence).term


class JourneyAggregator:

    def map_questions_to_journey(self, questions: Iterable[QuestionContext]) -> List[JourneyStageSummary]:
        staged: Dict[JourneyStage, List[QuestionContext]] = {stage: [] for stage in JourneyStage}
        for question in questions:
            staged[determine_stage(question)].append(question)

        anchors: Dict[str, datetime] = {}
        for question in staged[JourneyStage.DIAGNOSIS]:
            key = disease_key(question)
            if key is not None and (key not in anchors or question.timestamp < anchors[key]):
                anchors[key] = question.timestamp

        summaries = []
        for stage, stage_questions in staged.items():
            terms: Counter = Counter()
            for question in stage_questions:
                terms.update(concept.term for concept in question.concepts)

            timings = self._timings(stage_questions, anchors)
            summaries.append(JourneyStageSummary(
                stage=stage,
                question_count=len(stage_questions),
                common_concepts=[term for term, _ in terms.most_common(TOP_CONCEPTS)],
                average_timing=sum(timings) / len(timings) if timings else 0.0,
                timing_samples=len(timings),
            ))
        return summaries

    @staticmethod
    def _timings(questions: List[QuestionContext], anchors: Dict[str, datetime]) -> List[float]:
        timings = []
        for question in questions:
            key = disease_key(question)
            if key in anchors:
                delta = question.timestamp - anchors[key]
                timings.append(delta.total_seconds() / SECONDS_PER_DAY)
        return timings

    def get_journey_trends(
        self,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str] = Granularity.MONTHLY,
    ) -> List[Dict]:
        grouped = group_by_period(questions, granularity)
        return [
            {"period": period, "stages": self.map_questions_to_journey(grouped[period])}
            for period in sort_periods(grouped, granularity)
        ]
