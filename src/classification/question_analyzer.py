# turns raw question text into a QuestionContext record
# intent / setting / demographics are keyword based; medical concepts come from
# an upstream extraction step and are passed in as-is

import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from records import (
    ClinicalIntent,
    ClinicalSetting,
    ConceptCategory,
    MedicalConcept,
    PatientDemographics,
    QuestionContext,
    new_question_id,
)

logger = logging.getLogger(__name__)


class QuestionAnalyzer:

    # checked in order, first hit wins
    INTENT_KEYWORDS: Dict[ClinicalIntent, List[str]] = {
        ClinicalIntent.DIAGNOSIS: ["diagnose", "identify", "what is", "could this be", "differential"],
        ClinicalIntent.TREATMENT: ["treat", "therapy", "medication", "prescribe", "manage"],
        ClinicalIntent.MECHANISM: ["how does", "why does", "mechanism", "pathway", "cause"],
        ClinicalIntent.MONITORING: ["monitor", "follow-up", "track", "progress", "response"],
        ClinicalIntent.PREVENTION: ["prevent", "avoid", "reduce risk", "prophylaxis"],
        ClinicalIntent.PROGNOSIS: ["outcome", "prognosis", "survival", "long-term", "risk"],
    }
    DEFAULT_INTENT = ClinicalIntent.TREATMENT

    SETTING_INDICATORS: Dict[ClinicalSetting, List[str]] = {
        ClinicalSetting.PRIMARY_CARE: ["office", "primary care", "general practice"],
        ClinicalSetting.SPECIALIST: ["specialist", "referral", "consultation"],
        ClinicalSetting.EMERGENCY: ["emergency", "acute", "urgent", "emergency room"],
        ClinicalSetting.INPATIENT: ["hospital", "admitted", "ward", "inpatient"],
        ClinicalSetting.OUTPATIENT: ["outpatient", "clinic visit", "clinic"],
    }

    AGE_PATTERN = re.compile(
        r"\b(infant|baby|newborn|child|children|toddler|adolescent|teen(?:ager)?|"
        r"young adult|middle-aged|elderly|older adult|geriatric|senior)\b"
    )
    AGE_YEARS_PATTERN = re.compile(r"\b(\d{1,3})[- ]year[- ]old\b")
    GENDER_PATTERN = re.compile(r"\b(male|female|man|woman|boy|girl)\b")
    GENDER_MAP = {"man": "male", "boy": "male", "woman": "female", "girl": "female"}

    def determine_clinical_intent(self, text: str) -> ClinicalIntent:
        lowered = (text or "").lower()
        for intent, keywords in self.INTENT_KEYWORDS.items():
            if any(keyword in lowered for keyword in keywords):
                return intent
        return self.DEFAULT_INTENT

    def identify_clinical_setting(self, text: str) -> Optional[ClinicalSetting]:
        lowered = (text or "").lower()
        for setting, indicators in self.SETTING_INDICATORS.items():
            if any(indicator in lowered for indicator in indicators):
                return setting
        return None

    def extract_demographics(self, text: str) -> Optional[PatientDemographics]:
        """age descriptor + gender when the question mentions them, else None"""
        lowered = (text or "").lower()

        age_group = None
        age_match = self.AGE_PATTERN.search(lowered)
        years_match = self.AGE_YEARS_PATTERN.search(lowered)
        if age_match:
            age_group = age_match.group(1)
        elif years_match:
            age_group = self._age_descriptor(int(years_match.group(1)))

        gender = None
        gender_match = self.GENDER_PATTERN.search(lowered)
        if gender_match:
            gender = self.GENDER_MAP.get(gender_match.group(1), gender_match.group(1))

        if age_group is None and gender is None:
            return None
        return PatientDemographics(age_group=age_group, gender=gender)

    @staticmethod
    def _age_descriptor(years: int) -> str:
        if years < 2:
            return "infant"
        if years < 13:
            return "child"
        if years < 18:
            return "adolescent"
        if years < 30:
            return "young adult"
        if years < 45:
            return "adult"
        if years < 65:
            return "middle-aged"
        return "elderly"

    @staticmethod
    def map_treatment_indications(concepts: Iterable[MedicalConcept]) -> List[str]:
        """disease terms are treatment indications when a drug/treatment is also discussed"""
        concepts = list(concepts)
        has_therapy = any(
            c.category in (ConceptCategory.DRUG, ConceptCategory.TREATMENT) for c in concepts
        )
        if not has_therapy:
            return []
        indications = []
        for concept in concepts:
            if concept.category == ConceptCategory.DISEASE and concept.term not in indications:
                indications.append(concept.term)
        return indications

    def analyze_question(
        self,
        text: str,
        timestamp: Optional[datetime] = None,
        concepts: Optional[Iterable[MedicalConcept]] = None,
        demographics: Optional[PatientDemographics] = None,
        question_id: Optional[str] = None,
    ) -> QuestionContext:
        concepts = tuple(concepts or ())
        return QuestionContext(
            id=question_id or new_question_id(),
            timestamp=timestamp or datetime.now(timezone.utc),
            concepts=concepts,
            clinical_intent=self.determine_clinical_intent(text),
            demographics=demographics or self.extract_demographics(text),
            clinical_setting=self.identify_clinical_setting(text),
            treatment_indications=tuple(self.map_treatment_indications(concepts)),
            text=text or "",
        )
