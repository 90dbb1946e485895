# shared data model for classified clinical questions
# question contexts are created once and never mutated; aggregators and the
# trend detector only read them

import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd


class ConceptCategory(str, Enum):
    DISEASE = "disease"
    SYMPTOM = "symptom"
    TREATMENT = "treatment"
    DRUG = "drug"
    PROCEDURE = "procedure"


class ClinicalIntent(str, Enum):
    DIAGNOSIS = "diagnosis"
    TREATMENT = "treatment"
    MECHANISM = "mechanism"
    MONITORING = "monitoring"
    PREVENTION = "prevention"
    PROGNOSIS = "prognosis"


class ClinicalSetting(str, Enum):
    PRIMARY_CARE = "primary_care"
    SPECIALIST = "specialist"
    EMERGENCY = "emergency"
    INPATIENT = "inpatient"
    OUTPATIENT = "outpatient"


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """clamp to [low, high]; nan collapses to low"""
    if value is None or np.isnan(value):
        return low
    return float(min(max(value, low), high))


def ensure_utc(value: Any) -> datetime:
    """coerce a datetime / date / iso string into a timezone-aware utc datetime.
    naive datetimes are assumed to already be utc. raises ValueError if unparseable."""
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    elif isinstance(value, str):
        parsed = pd.to_datetime(value, errors="coerce", utc=True)
        if pd.isna(parsed):
            raise ValueError(f"Unparseable timestamp: {value!r}")
        value = parsed.to_pydatetime()
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if not isinstance(value, datetime):
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


WHITESPACE_PATTERN = re.compile(r"\s+")


def topic_id_for(term: str, category: str) -> str:
    slug = WHITESPACE_PATTERN.sub("_", term.strip().lower())
    return f"{category}_{slug}"


@dataclass(frozen=True)
class MedicalConcept:
    term: str
    category: ConceptCategory
    confidence: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "category", ConceptCategory(self.category))
        object.__setattr__(self, "confidence", clamp(self.confidence))

    @property
    def topic_id(self) -> str:
        return topic_id_for(self.term, self.category.value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MedicalConcept":
        return cls(
            term=str(data["term"]),
            category=ConceptCategory(str(data["category"]).lower()),
            confidence=float(data.get("confidence", 1.0)),
        )


@dataclass(frozen=True)
class PatientDemographics:
    age_group: Optional[str] = None
    gender: Optional[str] = None
    comorbidities: Tuple[str, ...] = ()
    risk_factors: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatientDemographics":
        return cls(
            age_group=data.get("ageGroup", data.get("age_group")),
            gender=data.get("gender"),
            comorbidities=tuple(data.get("comorbidities") or ()),
            risk_factors=tuple(data.get("riskFactors", data.get("risk_factors")) or ()),
        )


def new_question_id() -> str:
    return f"q_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class QuestionContext:
    id: str
    timestamp: datetime
    concepts: Tuple[MedicalConcept, ...] = ()
    clinical_intent: Optional[ClinicalIntent] = None
    demographics: Optional[PatientDemographics] = None
    clinical_setting: Optional[ClinicalSetting] = None
    treatment_indications: Tuple[str, ...] = ()
    text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        object.__setattr__(self, "concepts", tuple(self.concepts))
        object.__setattr__(self, "treatment_indications", tuple(self.treatment_indications))
        if self.clinical_intent is not None:
            object.__setattr__(self, "clinical_intent", ClinicalIntent(self.clinical_intent))
        if self.clinical_setting is not None:
            object.__setattr__(self, "clinical_setting", ClinicalSetting(self.clinical_setting))

    def topic_ids(self) -> List[str]:
        """distinct topic ids mentioned by this question, first-seen order"""
        seen = []
        for concept in self.concepts:
            if concept.topic_id not in seen:
                seen.append(concept.topic_id)
        return seen

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionContext":
        """build from the external record shape (camelCase or snake_case keys).
        raises ValueError if the timestamp is missing or malformed."""
        raw_ts = data.get("timestamp")
        if raw_ts is None:
            raise ValueError("Question record has no timestamp")

        raw_concepts = data.get("medicalConcepts", data.get("concepts")) or []
        demographics = data.get("demographics")
        intent = data.get("clinicalIntent", data.get("clinical_intent"))
        setting = data.get("clinicalSetting", data.get("clinical_setting"))

        return cls(
            id=str(data.get("id") or new_question_id()),
            timestamp=ensure_utc(raw_ts),
            concepts=tuple(MedicalConcept.from_dict(c) for c in raw_concepts),
            clinical_intent=ClinicalIntent(intent) if intent else None,
            demographics=PatientDemographics.from_dict(demographics) if demographics else None,
            clinical_setting=ClinicalSetting(setting) if setting else None,
            treatment_indications=tuple(
                data.get("treatmentIndications", data.get("treatment_indications")) or ()
            ),
            text=str(data.get("text") or ""),
        )


def to_native(obj: Any) -> Any:
    """recursively convert numpy/pandas/enum/datetime values to json-safe python types"""
    if isinstance(obj, dict):
        return {str(to_native(k)): to_native(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_native(item) for item in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (pd.Timestamp, datetime, date)):
        return obj.isoformat()
    if isinstance(obj, pd.Period):
        return str(obj)
    return obj
