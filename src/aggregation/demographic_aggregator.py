# demographic distribution of the patients behind a set of questions
# free-form age descriptors collapse into seven canonical groups

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from records import QuestionContext

from .buckets import Granularity, group_by_period, sort_periods

logger = logging.getLogger(__name__)


class AgeGroup(str, Enum):
    INFANT = "infant"
    CHILD = "child"
    ADOLESCENT = "adolescent"
    YOUNG_ADULT = "young adult"
    ADULT = "adult"
    MIDDLE_AGED = "middle-aged"
    ELDERLY = "elderly"


DEFAULT_AGE_GROUP = AgeGroup.ADULT

# checked in order; "young adult" must be tested before the adult default
AGE_GROUP_KEYWORDS = [
    (AgeGroup.INFANT, ["infant", "baby", "newborn", "neonat"]),
    (AgeGroup.CHILD, ["child", "toddler", "pediatric", "paediatric"]),
    (AgeGroup.ADOLESCENT, ["teen", "adolescent"]),
    (AgeGroup.YOUNG_ADULT, ["young"]),
    (AgeGroup.MIDDLE_AGED, ["middle"]),
    (AgeGroup.ELDERLY, ["elder", "senior", "geriatric", "older"]),
]


def normalize_age_group(descriptor: Optional[str]) -> AgeGroup:
    lowered = (descriptor or "").lower()
    for group, keywords in AGE_GROUP_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return group
    # decade ranges like "20-30" / "40s-50s"
    if "20" in lowered and "30" in lowered:
        return AgeGroup.YOUNG_ADULT
    if "40" in lowered and "50" in lowered:
        return AgeGroup.MIDDLE_AGED
    return DEFAULT_AGE_GROUP


def percentages(counts: Dict[str, int]) -> Dict[str, float]:
    total = sum(counts.values())
    if total == 0:
        return {key: 0.0 for key in counts}
    return {key: count / total * 100 for key, count in counts.items()}


@dataclass
class DemographicSummary:
    total_questions: int = 0
    age_groups: Dict[str, int] = field(default_factory=dict)
    age_group_percentages: Dict[str, float] = field(default_factory=dict)
    gender_distribution: Dict[str, int] = field(default_factory=dict)
    gender_percentages: Dict[str, float] = field(default_factory=dict)
    common_comorbidities: List[Dict] = field(default_factory=list)
    risk_factors: List[Dict] = field(default_factory=list)


class DemographicAggregator:

    def aggregate(self, questions: Iterable[QuestionContext]) -> DemographicSummary:
        with_demographics = [q for q in questions if q.demographics is not None]

        age_groups = {group.value: 0 for group in AgeGroup}
        genders: Counter = Counter()
        comorbidities: Counter = Counter()
        risk_factors: Counter = Counter()

        for question in with_demographics:
            demographics = question.demographics
            if demographics.age_group:
                age_groups[normalize_age_group(demographics.age_group).value] += 1
            if demographics.gender:
                genders[demographics.gender] += 1
            comorbidities.update(demographics.comorbidities)
            risk_factors.update(demographics.risk_factors)

        gender_distribution = dict(genders)
        return DemographicSummary(
            total_questions=len(with_demographics),
            age_groups=age_groups,
            age_group_percentages=percentages(age_groups),
            gender_distribution=gender_distribution,
            gender_percentages=percentages(gender_distribution),
            common_comorbidities=[
                {"condition": condition, "count": count}
                for condition, count in comorbidities.most_common()
            ],
            risk_factors=[
                {"factor": factor, "count": count}
                for factor, count in risk_factors.most_common()
            ],
        )

    def get_demographic_trends(
        self,
        questions: Iterable[QuestionContext],
        granularity: Union[Granularity, str] = Granularity.QUARTERLY,
    ) -> List[Dict]:
        grouped = group_by_period(questions, granularity)
        return [
            {"period": period, "demographics": self.aggregate(grouped[period])}
            for period in sort_periods(grouped, granularity)
        ]
