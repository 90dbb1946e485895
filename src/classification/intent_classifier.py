# rule-based classification of clinical questions
# maps one question to four parallel label sets: clinical intent, decision point,
# information gap and workflow stage, plus urgency / gap severity / patient context
# and a de-identified copy of the text. never raises on bad input.

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from records import to_native

from .deidentify import deidentify
from .labels import GapSeverity, Urgency
from .rules import ClassificationRules, load_rules

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.30
MAX_CONFIDENCE = 0.95
CONTEXT_EXCERPT_LENGTH = 100


@dataclass
class ClassifiedLabel:
    primary_type: Any
    secondary_types: List[Any] = field(default_factory=list)
    confidence: float = MIN_CONFIDENCE


@dataclass
class IntentResult(ClassifiedLabel):
    question_text: str = ""


@dataclass
class DecisionPoint(ClassifiedLabel):
    context: str = ""
    urgency: Urgency = Urgency.LOW


@dataclass
class InformationGap(ClassifiedLabel):
    topic_area: str = "general medicine"
    severity: GapSeverity = GapSeverity.MINOR


@dataclass
class WorkflowMapping(ClassifiedLabel):
    patient_context: str = "unspecified"


@dataclass
class ComprehensiveAnalysis:
    intent: IntentResult
    decision_point: DecisionPoint
    information_gap: InformationGap
    workflow: WorkflowMapping
    timestamp: Optional[datetime]
    text_length: int
    anonymized_text: str

    def to_dict(self) -> Dict[str, Any]:
        return to_native({
            "intent": vars(self.intent),
            "decision_point": vars(self.decision_point),
            "information_gap": vars(self.information_gap),
            "workflow": vars(self.workflow),
            "timestamp": self.timestamp,
            "text_length": self.text_length,
            "anonymized_text": self.anonymized_text,
        })


def calculate_confidence(text: str, match_count: int) -> float:
    """more matches and a longer question give more confidence, within [0.30, 0.95]"""
    if match_count <= 0:
        return MIN_CONFIDENCE
    base = min(0.5 + 0.1 * match_count, 0.9)
    length_factor = min(len(text) / 1000, 0.1)
    return round(min(base + length_factor, MAX_CONFIDENCE), 4)


class IntentClassifier:

    def __init__(self, rules: Optional[ClassificationRules] = None):
        self.rules = rules or load_rules()

    @staticmethod
    def _normalize(text: Optional[str]) -> str:
        if not text or not isinstance(text, str):
            return ""
        return text

    def _classify(self, taxonomy_name: str, text: str) -> Tuple[ClassifiedLabel, int]:
        """returns the label set and how many distinct labels matched"""
        taxonomy = self.rules.taxonomies[taxonomy_name]
        labels = taxonomy.match(text.lower())
        label = ClassifiedLabel(
            primary_type=labels[0] if labels else taxonomy.default,
            secondary_types=labels[1:],
            confidence=calculate_confidence(text, len(labels)),
        )
        return label, len(labels)

    # taxonomy entry points

    def analyze_intent(self, text: Optional[str]) -> IntentResult:
        text = self._normalize(text)
        label, _ = self._classify("intent", text)
        return IntentResult(**vars(label), question_text=text)

    def identify_decision_points(self, text: Optional[str]) -> DecisionPoint:
        text = self._normalize(text)
        label, _ = self._classify("decision", text)
        return DecisionPoint(
            **vars(label),
            context=self.extract_relevant_context(text),
            urgency=self.determine_urgency(text),
        )

    def identify_information_gaps(self, text: Optional[str]) -> InformationGap:
        text = self._normalize(text)
        label, gap_count = self._classify("information_gap", text)
        return InformationGap(
            **vars(label),
            topic_area=self.identify_topic_area(text),
            severity=self.determine_gap_severity(text, gap_count),
        )

    def map_to_workflow(self, text: Optional[str]) -> WorkflowMapping:
        text = self._normalize(text)
        label, _ = self._classify("workflow", text)
        return WorkflowMapping(**vars(label), patient_context=self.extract_patient_context(text))

    def analyze_comprehensive(self, text: Optional[str], timestamp: Optional[datetime] = None) -> ComprehensiveAnalysis:
        """all four taxonomies for one question. timestamp is the caller's to supply;
        it is left as None when not given so repeated calls stay identical."""
        text = self._normalize(text)
        return ComprehensiveAnalysis(
            intent=self.analyze_intent(text),
            decision_point=self.identify_decision_points(text),
            information_gap=self.identify_information_gaps(text),
            workflow=self.map_to_workflow(text),
            timestamp=timestamp,
            text_length=len(text),
            anonymized_text=self.anonymize_text(text),
        )

    def analyze_batch(self, texts: List[Optional[str]], timestamp: Optional[datetime] = None) -> List[ComprehensiveAnalysis]:
        if not texts:
            return []
        stamp = timestamp or datetime.now(timezone.utc)
        results = [self.analyze_comprehensive(text, stamp) for text in texts]
        logger.info(f"Classified {len(results)} questions")
        return results

    # derived fields

    def determine_urgency(self, text: str) -> Urgency:
        lowered = self._normalize(text).lower()
        if self.rules.urgent_pattern.search(lowered):
            return Urgency.HIGH
        if self.rules.moderate_pattern.search(lowered):
            return Urgency.MEDIUM
        return Urgency.LOW

    def determine_gap_severity(self, text: str, gap_count: int) -> GapSeverity:
        lowered = self._normalize(text).lower()
        if self.rules.critical_gap_pattern.search(lowered) or gap_count > 2:
            return GapSeverity.CRITICAL
        if gap_count == 2:
            return GapSeverity.MODERATE
        return GapSeverity.MINOR

    def extract_patient_context(self, text: str) -> str:
        lowered = self._normalize(text).lower()
        matches = []
        for pattern in self.rules.patient_context_patterns:
            found = pattern.search(lowered)
            if found:
                matches.append(found.group(0))
        return ", ".join(matches) if matches else "unspecified"

    def identify_topic_area(self, text: str) -> str:
        lowered = self._normalize(text).lower()
        for specialty in self.rules.topic_areas:
            if specialty in lowered:
                return specialty
        return "general medicine"

    @staticmethod
    def extract_relevant_context(text: str) -> str:
        if len(text) > CONTEXT_EXCERPT_LENGTH:
            return text[:CONTEXT_EXCERPT_LENGTH] + "..."
        return text

    def anonymize_text(self, text: str) -> str:
        return deidentify(self._normalize(text), self.rules.deidentification)
